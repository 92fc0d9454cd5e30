from __future__ import annotations

from typing import Iterable, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError

# Roles that run the admin dashboard (enrollment, holidays, payroll, any approval).
ADMIN_ROLES = frozenset({Role.ADMIN, Role.HR})

# Roles that use the employee dashboard: sign in/out and apply for leave.
SELF_SERVICE_ROLES = frozenset({Role.EMPLOYEE, Role.TEMP_VENDOR})


def require_role(current_role: Optional[Role], allowed: Iterable[Role], message: str = "You do not have permission") -> Role:
    if current_role is None or current_role not in set(allowed):
        raise AuthorizationError(message)
    return current_role


def require_approver(
    current_role: Optional[Role],
    *,
    approver_id: int,
    subject_manager_id: Optional[int],
) -> None:
    """Admin/HR may decide for anyone; a manager only for their direct reports."""

    if current_role in ADMIN_ROLES:
        return
    if current_role == Role.MANAGER and subject_manager_id is not None and int(subject_manager_id) == int(approver_id):
        return
    raise AuthorizationError("You can only review requests from your own team")
