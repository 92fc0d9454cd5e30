from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType
from .model import LeaveApplication, LeaveBalance, LeaveSummary


class LeaveRepository(Protocol):
    # Applications
    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        document_url: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def list_pending_for_team(self, manager_id: int) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def list_all(self, *, limit: int = 200) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def approve_and_deduct(
        self,
        *,
        leave_id: int,
        employee_id: int,
        leave_type: LeaveType,
        days: int,
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        """Approve a pending application and deduct ``days`` (floored at 0) in one transaction.

        Returns False, with no balance change, when the application is no longer pending.
        """

        raise NotImplementedError

    def reject(self, *, leave_id: int, approved_by: int, approved_at: datetime) -> bool:
        raise NotImplementedError

    def summarize(self) -> LeaveSummary:
        raise NotImplementedError

    # Balances
    def get_balance(self, employee_id: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def credit_compensatory(self, employee_id: int) -> None:
        """Add one compensatory day, creating the balance row with defaults if needed."""

        raise NotImplementedError
