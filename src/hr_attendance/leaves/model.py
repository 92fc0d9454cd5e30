from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional

from ..core.constants import DEFAULT_LEAVE_BALANCE
from ..core.enums import ApprovalStatus, LeaveType


def inclusive_days(start_date: date, end_date: date) -> int:
    """Number of calendar days in [start_date, end_date], both ends included."""
    return (end_date - start_date).days + 1


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: ApprovalStatus
    applied_at: datetime
    document_url: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    employee_name: Optional[str] = None

    @property
    def days(self) -> int:
        return inclusive_days(self.start_date, self.end_date)


@dataclass(frozen=True)
class LeaveBalance:
    """Remaining days per leave type.

    ``stored`` is False when no row exists yet and the defaults are shown.
    """

    employee_id: int
    counters: Dict[LeaveType, int] = field(default_factory=dict)
    stored: bool = True

    @classmethod
    def defaults(cls, employee_id: int) -> "LeaveBalance":
        return cls(
            employee_id=employee_id,
            counters={t: DEFAULT_LEAVE_BALANCE[t.value] for t in LeaveType},
            stored=False,
        )

    def available(self, leave_type: LeaveType) -> int:
        return int(self.counters.get(leave_type, 0))


@dataclass(frozen=True)
class UploadedDocument:
    filename: str
    data: bytes


@dataclass(frozen=True)
class LeaveSummary:
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0
