from __future__ import annotations

import csv
import io
import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.auth import current_employee_id, current_role, roles_required
from ..common.datetime_utils import parse_iso_date
from ..common.images import decode_data_url
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError
from .model import GeoPoint, worked_hours

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "attendance_id",
    "employee_id",
    "employee_name",
    "date",
    "signin_time",
    "signout_time",
    "hours",
    "status",
    "selfie_url",
]


def _location_from_form():
    return GeoPoint.parse(request.form.get("lat"), request.form.get("lng"))


def _selfie_from_request():
    upload = request.files.get("selfie")
    if upload and upload.filename:
        return upload.read()
    return decode_data_url(request.form.get("selfie_data"))


def register(app: Flask, container: Container) -> None:
    app.jinja_env.globals["worked_hours"] = worked_hours

    @app.route("/me", endpoint="employee_dashboard")
    @roles_required(Role.EMPLOYEE, Role.TEMP_VENDOR)
    def employee_dashboard():
        employee_id = current_employee_id()
        return render_template(
            "employee/dashboard.html",
            name=session.get("name"),
            today=container.attendance_service.today_record(employee_id),
            attendance=container.attendance_service.history(employee_id),
            leaves=container.leave_service.my_leaves(employee_id),
            balance=container.leave_service.balance_for(employee_id),
            holidays=container.holiday_service.list_all(),
            active_page="me",
        )

    @app.route("/attendance/sign-in", methods=["POST"], endpoint="sign_in")
    @roles_required(Role.EMPLOYEE, Role.TEMP_VENDOR)
    def sign_in():
        try:
            container.attendance_service.sign_in(
                current_employee_id(),
                current_role=current_role(),
                selfie=_selfie_from_request(),
                location=_location_from_form(),
            )
            flash("Sign in successful! Selfie captured and waiting for manager approval.", "success")
        except DomainError as e:
            flash(str(e), "warning")
        except Exception as e:
            logger.exception("sign-in failed for employee %s", session.get("employee_id"))
            flash(f"Error during sign in: {e}" if app.config.get("DEBUG") else "Error during sign in", "danger")
        return redirect(url_for("employee_dashboard"))

    @app.route("/attendance/sign-out", methods=["POST"], endpoint="sign_out")
    @roles_required(Role.EMPLOYEE, Role.TEMP_VENDOR)
    def sign_out():
        try:
            container.attendance_service.sign_out(current_employee_id(), location=_location_from_form())
            flash("Sign out successful!", "success")
        except DomainError as e:
            flash(str(e), "warning")
        except Exception as e:
            logger.exception("sign-out failed for employee %s", session.get("employee_id"))
            flash(f"Error during sign out: {e}" if app.config.get("DEBUG") else "Error during sign out", "danger")
        return redirect(url_for("employee_dashboard"))

    @app.route("/manager", endpoint="manager_dashboard")
    @roles_required(Role.MANAGER)
    def manager_dashboard():
        manager_id = current_employee_id()
        return render_template(
            "manager/dashboard.html",
            name=session.get("name"),
            pending_attendance=container.attendance_service.pending_for_team(manager_id),
            pending_leaves=container.leave_service.pending_for_team(manager_id),
            team=container.employee_service.list_team(manager_id),
            active_page="manager",
        )

    def _decide(attendance_id: int, approve: bool):
        action = container.attendance_service.approve if approve else container.attendance_service.reject
        label = "approved" if approve else "rejected"
        try:
            action(current_role=current_role(), approver_id=current_employee_id(), attendance_id=attendance_id)
            flash(f"Attendance {label} successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("attendance %s could not be %s", attendance_id, label)
            flash("System error while reviewing attendance", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/attendance/<int:attendance_id>/approve", methods=["POST"], endpoint="approve_attendance")
    @roles_required(Role.MANAGER, Role.ADMIN, Role.HR)
    def approve_attendance(attendance_id: int):
        return _decide(attendance_id, True)

    @app.route("/attendance/<int:attendance_id>/reject", methods=["POST"], endpoint="reject_attendance")
    @roles_required(Role.MANAGER, Role.ADMIN, Role.HR)
    def reject_attendance(attendance_id: int):
        return _decide(attendance_id, False)

    @app.route("/manager/team/<int:employee_id>/mark-present", methods=["POST"], endpoint="mark_present")
    @roles_required(Role.MANAGER)
    def mark_present(employee_id: int):
        try:
            container.attendance_service.mark_present(
                current_role=current_role(),
                approver_id=current_employee_id(),
                employee_id=employee_id,
            )
            flash("Attendance marked.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("mark-present failed for employee %s", employee_id)
            flash("System error while marking attendance", "danger")
        return redirect(url_for("manager_dashboard"))

    @app.route("/admin/attendance.csv", methods=["GET"], endpoint="export_attendance_csv")
    @roles_required(Role.ADMIN, Role.HR)
    def export_attendance_csv():
        today = date.today()
        try:
            start = parse_iso_date(request.args.get("start") or today.replace(day=1).strftime("%Y-%m-%d"))
            end = parse_iso_date(request.args.get("end") or today.strftime("%Y-%m-%d"))
            rows = container.attendance_service.export_rows(current_role=current_role(), start=start, end=end)
        except DomainError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_dashboard"))

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
