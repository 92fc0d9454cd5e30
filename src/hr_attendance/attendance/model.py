from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    @classmethod
    def parse(cls, lat, lng) -> Optional["GeoPoint"]:
        """Build a point from form values; None when either coordinate is missing."""

        if lat in (None, "") or lng in (None, ""):
            return None
        try:
            point = cls(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError):
            raise ValidationError("Location coordinates are not valid numbers")
        if not (-90.0 <= point.lat <= 90.0 and -180.0 <= point.lng <= 180.0):
            raise ValidationError("Location coordinates are out of range")
        return point


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one sign-in/sign-out cycle with its approval status."""

    attendance_id: int
    employee_id: int
    signin_time: datetime
    status: ApprovalStatus
    signin_location: Optional[GeoPoint] = None
    signin_selfie_url: Optional[str] = None
    signout_time: Optional[datetime] = None
    signout_location: Optional[GeoPoint] = None
    approved_by: Optional[int] = None
    employee_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.signout_time is None


def worked_hours(signin_time: Optional[datetime], signout_time: Optional[datetime]) -> Optional[float]:
    """Hours between sign-in and sign-out, never negative; None while still signed in."""

    if signin_time is None or signout_time is None:
        return None
    return max((signout_time - signin_time).total_seconds() / 3600.0, 0.0)


@dataclass(frozen=True)
class AttendanceSummary:
    """Admin report counters; ``signed_in_today`` counts distinct employees."""

    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0
    signed_in_today: int = 0
