from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.permissions import require_role
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayService:
    """Admin-managed holiday calendar."""

    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_all(self) -> Sequence[Holiday]:
        return self._holidays.list_all()

    def is_holiday(self, day: date) -> bool:
        return self._holidays.get_by_date(day) is not None

    def add(self, *, current_role: Optional[Role], holiday_date: date, name: str, description: str = "") -> int:
        require_role(current_role, {Role.ADMIN}, "Only admins can add holidays")
        name = require_non_empty(name, "Holiday name")

        if self._holidays.get_by_date(holiday_date):
            raise ValidationError(f"{holiday_date.isoformat()} is already a holiday")

        holiday_id = self._holidays.create(
            holiday_date=holiday_date,
            name=name,
            description=(description or "").strip() or None,
        )
        logger.info("holiday added: %s %s", holiday_date.isoformat(), name)
        return holiday_id

    def delete(self, *, current_role: Optional[Role], holiday_id: int) -> None:
        require_role(current_role, {Role.ADMIN}, "Only admins can delete holidays")
        if not self._holidays.delete(int(holiday_id)):
            raise NotFoundError("Holiday not found")
        logger.info("holiday %s deleted", holiday_id)
