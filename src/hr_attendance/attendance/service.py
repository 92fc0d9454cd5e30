from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import day_bounds
from ..common.images import normalize_selfie
from ..common.permissions import ADMIN_ROLES, SELF_SERVICE_ROLES, require_approver, require_role
from ..core.constants import DEFAULT_ADMIN_ATTENDANCE_LIMIT, DEFAULT_HISTORY_LIMIT, SELFIE_BUCKET
from ..core.enums import ApprovalStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..holidays.service import HolidayService
from ..leaves.service import LeaveService
from ..storage.base import ObjectStorage
from .model import AttendanceRecord, AttendanceSummary, GeoPoint, worked_hours
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        holidays: HolidayService,
        leaves: LeaveService,
        storage: ObjectStorage,
    ):
        self._attendance = attendance
        self._employees = employees
        self._holidays = holidays
        self._leaves = leaves
        self._storage = storage

    def sign_in(
        self,
        employee_id: int,
        *,
        current_role: Optional[Role],
        selfie: Optional[bytes],
        location: Optional[GeoPoint],
        now: Optional[datetime] = None,
    ) -> int:
        """Create a pending attendance record.

        Both a selfie and a location are required; nothing is written when either is missing.
        A sign-in on a holiday credits one compensatory leave once the record exists.
        """

        require_role(current_role, SELF_SERVICE_ROLES, "Only employees can sign in")
        if not selfie:
            raise ValidationError("Please capture your selfie first for face verification")
        if location is None:
            raise ValidationError("Please allow location access to sign in")

        now = now or datetime.now()
        today = now.date()

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        if self._attendance.get_open_for_employee_on(employee_id, today):
            raise ValidationError("You are already signed in today; sign out first")

        selfie_url = self._store_selfie(employee_id, selfie, now)

        attendance_id = self._attendance.create_signin(
            employee_id=employee_id,
            signin_time=now,
            location=location,
            selfie_url=selfie_url,
            status=ApprovalStatus.PENDING,
        )

        if self._holidays.is_holiday(today):
            self._leaves.credit_compensatory(employee_id)
        logger.info("employee %s signed in (attendance %s)", employee_id, attendance_id)
        return attendance_id

    def _store_selfie(self, employee_id: int, selfie: bytes, now: datetime) -> str:
        png = normalize_selfie(selfie)
        key = f"attendance-selfies/{int(employee_id)}/{int(now.timestamp() * 1000)}.png"
        self._storage.upload(SELFIE_BUCKET, key, png)
        return self._storage.public_url(SELFIE_BUCKET, key)

    def sign_out(
        self,
        employee_id: int,
        *,
        location: Optional[GeoPoint],
        now: Optional[datetime] = None,
    ) -> None:
        if location is None:
            raise ValidationError("Please allow location access to sign out")

        now = now or datetime.now()
        record = self._attendance.get_open_for_employee_on(employee_id, now.date())
        if not record:
            raise ValidationError("No active sign-in found for today")

        if not self._attendance.update_signout(attendance_id=record.attendance_id, signout_time=now, location=location):
            raise ValidationError("You have already signed out")
        logger.info("employee %s signed out (attendance %s)", employee_id, record.attendance_id)

    def _decide(
        self,
        *,
        current_role: Optional[Role],
        approver_id: int,
        attendance_id: int,
        status: ApprovalStatus,
    ) -> None:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")

        employee = self._employees.get_by_id(record.employee_id)
        require_approver(
            current_role,
            approver_id=approver_id,
            subject_manager_id=employee.manager_id if employee else None,
        )

        if record.status != ApprovalStatus.PENDING or not self._attendance.decide(
            attendance_id=record.attendance_id, status=status, approved_by=int(approver_id)
        ):
            raise ValidationError("Attendance record was already processed")
        logger.info("attendance %s %s by %s", record.attendance_id, status.value, approver_id)

    def approve(self, *, current_role: Optional[Role], approver_id: int, attendance_id: int) -> None:
        self._decide(
            current_role=current_role,
            approver_id=approver_id,
            attendance_id=attendance_id,
            status=ApprovalStatus.APPROVED,
        )

    def reject(self, *, current_role: Optional[Role], approver_id: int, attendance_id: int) -> None:
        self._decide(
            current_role=current_role,
            approver_id=approver_id,
            attendance_id=attendance_id,
            status=ApprovalStatus.REJECTED,
        )

    def mark_present(
        self,
        *,
        current_role: Optional[Role],
        approver_id: int,
        employee_id: int,
        now: Optional[datetime] = None,
    ) -> int:
        """Manager marks a team member present: an already-approved record without selfie."""

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        require_approver(current_role, approver_id=approver_id, subject_manager_id=employee.manager_id)

        attendance_id = self._attendance.create_signin(
            employee_id=employee.employee_id,
            signin_time=now or datetime.now(),
            location=None,
            selfie_url=None,
            status=ApprovalStatus.APPROVED,
            approved_by=int(approver_id),
        )
        logger.info("employee %s marked present by %s (attendance %s)", employee.employee_id, approver_id, attendance_id)
        return attendance_id

    # -------- Read side --------
    def history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_recent_for_employee(int(employee_id), limit)

    def today_record(self, employee_id: int, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_latest_for_employee_on(int(employee_id), today or date.today())

    def pending_for_team(self, manager_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_pending_for_team(int(manager_id))

    def recent(self, *, limit: int = DEFAULT_ADMIN_ATTENDANCE_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_recent(limit)

    def summary(self, *, current_role: Optional[Role], today: Optional[date] = None) -> AttendanceSummary:
        require_role(current_role, ADMIN_ROLES)
        return self._attendance.summarize(today or date.today())

    def export_rows(self, *, current_role: Optional[Role], start: date, end: date) -> list[dict]:
        """Rows for the admin CSV export, sign-in dates in [start, end]."""

        require_role(current_role, ADMIN_ROLES)
        if end < start:
            raise ValidationError("End date must be on or after the start date")

        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(end)
        rows = []
        for r in self._attendance.list_in_range(start=range_start, end=range_end):
            hours = worked_hours(r.signin_time, r.signout_time)
            rows.append(
                {
                    "attendance_id": r.attendance_id,
                    "employee_id": r.employee_id,
                    "employee_name": r.employee_name or "",
                    "date": r.signin_time.strftime("%Y-%m-%d"),
                    "signin_time": r.signin_time.strftime("%H:%M:%S"),
                    "signout_time": r.signout_time.strftime("%H:%M:%S") if r.signout_time else "",
                    "hours": f"{hours:.2f}" if hours is not None else "",
                    "status": r.status.value,
                    "selfie_url": r.signin_selfie_url or "",
                }
            )
        return rows
