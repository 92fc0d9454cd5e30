from __future__ import annotations

import logging

from flask import Flask, flash, redirect, request, url_for

from ..common.auth import current_employee_id, current_role, roles_required
from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError
from .model import UploadedDocument

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/leaves", methods=["POST"], endpoint="apply_leave")
    @roles_required(Role.EMPLOYEE, Role.TEMP_VENDOR)
    def apply_leave():
        try:
            upload = request.files.get("document")
            document = None
            if upload and upload.filename:
                document = UploadedDocument(filename=upload.filename, data=upload.read())

            container.leave_service.apply(
                current_role=current_role(),
                employee_id=current_employee_id(),
                leave_type=request.form.get("leave_type", "casual"),
                start_date=parse_iso_date(request.form.get("start_date", "")),
                end_date=parse_iso_date(request.form.get("end_date", "")),
                reason=request.form.get("reason", ""),
                document=document,
            )
            flash("Leave application submitted successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("leave application failed")
            flash("System error while submitting leave", "danger")
        return redirect(url_for("employee_dashboard"))

    def _decide(leave_id: int, approve: bool):
        action = container.leave_service.approve if approve else container.leave_service.reject
        label = "approved" if approve else "rejected"
        try:
            action(current_role=current_role(), approver_id=current_employee_id(), leave_id=leave_id)
            flash(f"Leave {label} successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("leave %s could not be %s", leave_id, label)
            flash("System error while reviewing leave", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @roles_required(Role.MANAGER, Role.ADMIN, Role.HR)
    def approve_leave(leave_id: int):
        return _decide(leave_id, True)

    @app.route("/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @roles_required(Role.MANAGER, Role.ADMIN, Role.HR)
    def reject_leave(leave_id: int):
        return _decide(leave_id, False)
