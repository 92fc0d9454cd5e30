from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus
from .model import AttendanceRecord, AttendanceSummary, GeoPoint


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_employee_on(self, employee_id: int, day: date) -> Optional[AttendanceRecord]:
        """Latest self sign-in (with selfie) on ``day`` that has no sign-out yet.

        Records a manager marked present carry no selfie and are never open.
        """

        raise NotImplementedError

    def get_latest_for_employee_on(self, employee_id: int, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_pending_for_team(self, manager_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records whose sign-in falls in [start, end)."""

        raise NotImplementedError

    def create_signin(
        self,
        *,
        employee_id: int,
        signin_time: datetime,
        location: Optional[GeoPoint],
        selfie_url: Optional[str],
        status: ApprovalStatus,
        approved_by: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def update_signout(self, *, attendance_id: int, signout_time: datetime, location: GeoPoint) -> bool:
        """Set sign-out only if it is not set yet."""

        raise NotImplementedError

    def decide(self, *, attendance_id: int, status: ApprovalStatus, approved_by: int) -> bool:
        """Move a pending record to ``status``; False when it is no longer pending."""

        raise NotImplementedError

    def summarize(self, day: date) -> AttendanceSummary:
        """Counts over all records by status, plus employees who signed in on ``day``."""

        raise NotImplementedError
