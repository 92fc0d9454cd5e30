from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.permissions import ADMIN_ROLES, require_role
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Dashboard, Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_DASHBOARDS = {
    Role.ADMIN: Dashboard.ADMIN,
    Role.HR: Dashboard.ADMIN,
    Role.MANAGER: Dashboard.MANAGER,
    Role.EMPLOYEE: Dashboard.EMPLOYEE,
    Role.TEMP_VENDOR: Dashboard.EMPLOYEE,
}


def dashboard_for(role) -> Optional[Dashboard]:
    """Resolve a role (enum or raw stored string) to the dashboard it may open.

    Anything outside the known roles gets no dashboard.
    """
    if not isinstance(role, Role):
        role = Role.parse(role)
    return _DASHBOARDS.get(role) if role is not None else None


@dataclass(frozen=True)
class SessionEmployee:
    """What we store into the Flask session after login."""

    employee_id: int
    full_name: str
    email: str
    role: Optional[Role]


class AuthService:
    """Use case: authenticate an employee (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, email: str, password: str) -> SessionEmployee:
        employee = self._employees.get_by_email((email or "").strip().lower())
        if not employee or not employee.is_active:
            logger.warning("login refused for %r: unknown or inactive account", email)
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            logger.warning("login refused for %r: wrong password", email)
            raise AuthenticationError("Invalid email or password")

        return SessionEmployee(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            email=employee.email,
            role=employee.role,
        )


class EmployeeService:
    """Use case: enroll and manage employees (admin/hr)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def enroll(
        self,
        *,
        current_role: Optional[Role],
        full_name: str,
        email: str,
        password: str,
        role: Role,
        department: Optional[str] = None,
        manager_id: Optional[int] = None,
    ) -> int:
        require_role(current_role, ADMIN_ROLES, "Only admin or HR can enroll employees")

        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_email(email):
            raise ValidationError("An employee with this email already exists")
        if manager_id is not None:
            self._require_manager(manager_id)

        employee_id = self._employees.create(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=(department or "").strip() or None,
            manager_id=manager_id,
        )
        logger.info("enrolled employee %s (%s) as %s", employee_id, email, role.value)
        return employee_id

    def reassign(
        self,
        *,
        current_role: Optional[Role],
        employee_id: int,
        role: Role,
        manager_id: Optional[int],
    ) -> None:
        require_role(current_role, ADMIN_ROLES, "Only admin or HR can reassign employees")

        employee = self.get(employee_id)
        if manager_id is not None:
            if int(manager_id) == employee.employee_id:
                raise ValidationError("An employee cannot be their own manager")
            self._require_manager(manager_id)

        self._employees.update_assignment(employee.employee_id, role=role, manager_id=manager_id)
        logger.info("employee %s reassigned: role=%s manager=%s", employee.employee_id, role.value, manager_id)

    def _require_manager(self, manager_id: int) -> Employee:
        manager = self._employees.get_by_id(int(manager_id))
        if not manager:
            raise ValidationError("Selected manager does not exist")
        return manager

    def list_all(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        return self._employees.list_team(int(manager_id))

    def role_counts(self) -> dict:
        counts = Counter(e.role.value if e.role else "unknown" for e in self._employees.list_all())
        out = {role.value: counts.get(role.value, 0) for role in Role}
        out["total"] = sum(counts.values())
        return out
