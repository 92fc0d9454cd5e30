from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, full_name, email, password_hash, role, department, manager_id, is_active, created_at"


def _to_employee(row: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role.parse(row.get("role")),
        department=row.get("department"),
        manager_id=int(row["manager_id"]) if row.get("manager_id") is not None else None,
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def create(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        manager_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(full_name, email, password_hash, role, department, manager_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (full_name, email, password_hash, role.value, department, manager_id),
            )
            return int(cur.lastrowid)

    def update_assignment(self, employee_id: int, *, role: Role, manager_id: Optional[int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET role=%s, manager_id=%s WHERE employee_id=%s",
                (role.value, manager_id, int(employee_id)),
            )

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY created_at DESC, employee_id DESC")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE manager_id=%s ORDER BY full_name",
                (int(manager_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]
