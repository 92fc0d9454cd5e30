from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.auth import current_role, login_required, render_forbidden, roles_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Dashboard, Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from .service import dashboard_for

logger = logging.getLogger(__name__)

_DASHBOARD_ENDPOINTS = {
    Dashboard.ADMIN: "admin_dashboard",
    Dashboard.MANAGER: "manager_dashboard",
    Dashboard.EMPLOYEE: "employee_dashboard",
}


def _parse_role(value: str) -> Role:
    role = Role.parse(value)
    if role is None:
        raise ValidationError("Unknown role")
    return role


def _parse_manager_id(value: str):
    value = (value or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError("Manager is not valid")


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if "employee_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_emp = container.auth_service.authenticate(email, password)

                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

                session["employee_id"] = s_emp.employee_id
                session["name"] = s_emp.full_name
                session["email"] = s_emp.email
                session["role"] = s_emp.role.value if s_emp.role else None

                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("login failed")
                flash("System error while signing in", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        target = dashboard_for(session.get("role"))
        if target is None:
            logger.warning("no dashboard for role %r (employee %s)", session.get("role"), session.get("employee_id"))
            return render_forbidden("Your role does not have a dashboard. Contact your administrator.")
        return redirect(url_for(_DASHBOARD_ENDPOINTS[target]))

    @app.route("/admin", endpoint="admin_dashboard")
    @roles_required(Role.ADMIN, Role.HR)
    def admin_dashboard():
        employees = container.employee_service.list_all()
        return render_template(
            "admin/dashboard.html",
            employees=employees,
            managers=[e for e in employees if e.role == Role.MANAGER],
            counts=container.employee_service.role_counts(),
            attendance=container.attendance_service.recent(),
            leaves=container.leave_service.all_applications(current_role=current_role()),
            attendance_summary=container.attendance_service.summary(current_role=current_role()),
            leave_summary=container.leave_service.summary(current_role=current_role()),
            roles=list(Role),
            active_page="admin",
        )

    @app.route("/admin/employees", methods=["POST"], endpoint="enroll_employee")
    @roles_required(Role.ADMIN, Role.HR)
    def enroll_employee():
        try:
            container.employee_service.enroll(
                current_role=current_role(),
                full_name=request.form.get("full_name", ""),
                email=request.form.get("email", ""),
                password=request.form.get("password", ""),
                role=_parse_role(request.form.get("role", Role.EMPLOYEE.value)),
                department=request.form.get("department", ""),
                manager_id=_parse_manager_id(request.form.get("manager_id", "")),
            )
            flash("Employee added successfully!", "success")
        except DomainError as e:
            flash(f"Error adding employee: {e}", "danger")
        except Exception:
            logger.exception("enrollment failed")
            flash("System error while adding employee", "danger")
        return redirect(url_for("admin_dashboard"))

    @app.route("/admin/employees/<int:employee_id>/assign", methods=["POST"], endpoint="reassign_employee")
    @roles_required(Role.ADMIN, Role.HR)
    def reassign_employee(employee_id: int):
        try:
            container.employee_service.reassign(
                current_role=current_role(),
                employee_id=employee_id,
                role=_parse_role(request.form.get("role", "")),
                manager_id=_parse_manager_id(request.form.get("manager_id", "")),
            )
            flash("Employee updated.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("reassignment of employee %s failed", employee_id)
            flash("System error while updating employee", "danger")
        return redirect(url_for("admin_dashboard"))
