from __future__ import annotations

import logging

from flask import Flask, flash, render_template, request

from ..common.auth import current_role, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _build_slip():
        employee_id = request.args.get("employee_id", "")
        month = request.args.get("month", "")
        if not employee_id or not month:
            return None
        try:
            return container.salary_slip_service.build_slip(
                current_role=current_role(),
                employee_id=int(employee_id),
                month=month,
            )
        except DomainError as e:
            flash(str(e), "danger")
        except ValueError:
            flash("Please select employee and month", "warning")
        return None

    @app.route("/admin/salary-slip", methods=["GET"], endpoint="salary_slip")
    @roles_required(Role.ADMIN, Role.HR)
    def salary_slip():
        return render_template(
            "admin/salary_slip.html",
            employees=container.employee_service.list_all(),
            selected_employee=request.args.get("employee_id", ""),
            selected_month=request.args.get("month", ""),
            slip=_build_slip(),
            active_page="salary_slip",
        )

    @app.route("/admin/salary-slip/print", methods=["GET"], endpoint="salary_slip_print")
    @roles_required(Role.ADMIN, Role.HR)
    def salary_slip_print():
        slip = _build_slip()
        if slip is None:
            return render_template("admin/salary_slip_print.html", slip=None), 400
        return render_template("admin/salary_slip_print.html", slip=slip)
