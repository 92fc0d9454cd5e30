from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: a person with login credentials and a role.

    ``role`` is None when the stored value is not one of the known roles.
    """

    employee_id: int
    full_name: str
    email: str
    password_hash: str
    role: Optional[Role]
    department: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
