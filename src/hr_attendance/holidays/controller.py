from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.auth import current_role, login_required
from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/holidays", methods=["GET", "POST"], endpoint="holidays")
    @login_required
    def holidays():
        if request.method == "POST":
            try:
                container.holiday_service.add(
                    current_role=current_role(),
                    holiday_date=parse_iso_date(request.form.get("date", "")),
                    name=request.form.get("name", ""),
                    description=request.form.get("description", ""),
                )
                flash("Holiday added.", "success")
                return redirect(url_for("holidays"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("adding holiday failed")
                flash("System error while adding holiday", "danger")

        return render_template(
            "holidays.html",
            holidays=container.holiday_service.list_all(),
            can_edit=current_role() == Role.ADMIN,
            active_page="holidays",
        )

    @app.route("/holidays/<int:holiday_id>/delete", methods=["POST"], endpoint="delete_holiday")
    @login_required
    def delete_holiday(holiday_id: int):
        try:
            container.holiday_service.delete(current_role=current_role(), holiday_id=holiday_id)
            flash("Holiday deleted.", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("deleting holiday %s failed", holiday_id)
            flash("System error while deleting holiday", "danger")
        return redirect(url_for("holidays"))
