from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_LEAVE_BALANCE
from ..core.enums import ApprovalStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveApplication, LeaveBalance, LeaveSummary
from .repository import LeaveRepository

_SELECT = """
    SELECT l.leave_id, l.employee_id, e.full_name AS employee_name,
           l.leave_type, l.start_date, l.end_date, l.reason, l.document_url,
           l.status, l.applied_at, l.approved_by, l.approved_at
    FROM leaves l
    JOIN employees e ON e.employee_id = l.employee_id
"""

_BALANCE_COLUMNS = ", ".join(t.balance_column for t in LeaveType)


def _to_application(r: Dict[str, Any]) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=ApprovalStatus(r["status"]),
        applied_at=r["applied_at"],
        document_url=r.get("document_url"),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
        employee_name=r.get("employee_name"),
    )


def _insert_balance_sql(on_duplicate: str) -> str:
    placeholders = ",".join(["%s"] * (len(LeaveType) + 1))
    return f"""
        INSERT INTO leave_balances(employee_id, {_BALANCE_COLUMNS})
        VALUES({placeholders})
        ON DUPLICATE KEY UPDATE {on_duplicate}
    """


def _initial_counters(**overrides: int) -> list[int]:
    values = dict(DEFAULT_LEAVE_BALANCE)
    values.update(overrides)
    return [int(values[t.value]) for t in LeaveType]


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(employee_id, leave_type, start_date, end_date, reason, document_url, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    reason,
                    document_url,
                    ApprovalStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_application(r) if r else None

    def list_for_employee(self, employee_id: int) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.employee_id=%s ORDER BY l.applied_at DESC", (int(employee_id),))
            return [_to_application(r) for r in fetchall(cur)]

    def list_pending_for_team(self, manager_id: int) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.manager_id=%s AND l.status=%s ORDER BY l.applied_at DESC",
                (int(manager_id), ApprovalStatus.PENDING.value),
            )
            return [_to_application(r) for r in fetchall(cur)]

    def list_all(self, *, limit: int = 200) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY l.applied_at DESC LIMIT %s", (int(limit),))
            return [_to_application(r) for r in fetchall(cur)]

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
        column = leave_type.balance_column
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    ApprovalStatus.APPROVED.value,
                    int(approved_by),
                    approved_at,
                    int(leave_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            if cur.rowcount <= 0:
                return False

            # Same transaction: a missing row starts from the defaults minus this leave.
            initial = _initial_counters(
                **{leave_type.value: max(0, DEFAULT_LEAVE_BALANCE[leave_type.value] - int(days))}
            )
            cur.execute(
                _insert_balance_sql(f"{column} = GREATEST(0, {column} - %s)"),
                (int(employee_id), *initial, int(days)),
            )
            return True

    def reject(self, *, leave_id: int, approved_by: int, approved_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    ApprovalStatus.REJECTED.value,
                    int(approved_by),
                    approved_at,
                    int(leave_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def summarize(self) -> LeaveSummary:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(status=%s), 0) AS approved,
                       COALESCE(SUM(status=%s), 0) AS pending,
                       COALESCE(SUM(status=%s), 0) AS rejected
                FROM leaves
                """,
                (ApprovalStatus.APPROVED.value, ApprovalStatus.PENDING.value, ApprovalStatus.REJECTED.value),
            )
            r = fetchone(cur) or {}
            return LeaveSummary(
                total=int(r.get("total") or 0),
                approved=int(r.get("approved") or 0),
                pending=int(r.get("pending") or 0),
                rejected=int(r.get("rejected") or 0),
            )

    def get_balance(self, employee_id: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT employee_id, {_BALANCE_COLUMNS} FROM leave_balances WHERE employee_id=%s",
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveBalance(
                employee_id=int(r["employee_id"]),
                counters={t: int(r[t.balance_column] or 0) for t in LeaveType},
            )

    def credit_compensatory(self, employee_id: int) -> None:
        column = LeaveType.COMPENSATORY.balance_column
        initial = _initial_counters(compensatory=DEFAULT_LEAVE_BALANCE["compensatory"] + 1)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _insert_balance_sql(f"{column} = {column} + 1"),
                (int(employee_id), *initial),
            )
