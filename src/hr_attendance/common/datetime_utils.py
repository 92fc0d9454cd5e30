from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Tuple

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_month(value: str) -> Tuple[date, date]:
    """Parse YYYY-MM into [first day, first day of next month)."""
    try:
        start = datetime.strptime((value or "").strip(), "%Y-%m").date()
    except ValueError:
        raise ValidationError(f"Invalid month: {value!r} (expected YYYY-MM)")
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)

