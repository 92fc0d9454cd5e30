from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, session, url_for

from ..core.enums import Role


def current_role() -> Optional[Role]:
    return Role.parse(session.get("role"))


def current_employee_id() -> int:
    return int(session["employee_id"])


def render_forbidden(message: str = "You do not have access to this page."):
    current_user = {"full_name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user, message=message), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def roles_required(*allowed: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "employee_id" not in session:
                return redirect(url_for("login"))
            if current_role() not in allowed:
                return render_forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator
