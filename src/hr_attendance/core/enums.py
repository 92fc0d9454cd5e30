from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Roles controlling which dashboard an employee sees."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    TEMP_VENDOR = "temp_vendor"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Role"]:
        """Return the Role for a stored value, or None when it is not a known role."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Dashboard(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class ApprovalStatus(str, Enum):
    """Approval workflow shared by attendance records and leave applications."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    CASUAL = "casual"
    SICK = "sick"
    EARNED = "earned"
    COMPENSATORY = "compensatory"

    @property
    def balance_column(self) -> str:
        # leave_balances.<type>_leaves
        return f"{self.value}_leaves"
