from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import day_bounds
from ..core.enums import ApprovalStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceSummary, GeoPoint
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.employee_id, e.full_name AS employee_name,
           a.signin_time, a.signin_lat, a.signin_lng, a.signin_selfie_url,
           a.signout_time, a.signout_lat, a.signout_lng,
           a.status, a.approved_by
    FROM attendance a
    JOIN employees e ON e.employee_id = a.employee_id
"""


def _point(lat: Any, lng: Any) -> Optional[GeoPoint]:
    if lat is None or lng is None:
        return None
    return GeoPoint(lat=as_float(lat), lng=as_float(lng))


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        signin_time=r["signin_time"],
        status=ApprovalStatus(r["status"]),
        signin_location=_point(r.get("signin_lat"), r.get("signin_lng")),
        signin_selfie_url=r.get("signin_selfie_url"),
        signout_time=r.get("signout_time"),
        signout_location=_point(r.get("signout_lat"), r.get("signout_lng")),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        employee_name=r.get("employee_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_open_for_employee_on(self, employee_id: int, day: date) -> Optional[AttendanceRecord]:
        start, end = day_bounds(day)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE a.employee_id=%s AND a.signin_time >= %s AND a.signin_time < %s
                  AND a.signout_time IS NULL AND a.signin_selfie_url IS NOT NULL
                ORDER BY a.signin_time DESC
                LIMIT 1
                """,
                (int(employee_id), start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_latest_for_employee_on(self, employee_id: int, day: date) -> Optional[AttendanceRecord]:
        start, end = day_bounds(day)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE a.employee_id=%s AND a.signin_time >= %s AND a.signin_time < %s
                ORDER BY a.signin_time DESC
                LIMIT 1
                """,
                (int(employee_id), start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.employee_id=%s ORDER BY a.signin_time DESC LIMIT %s",
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY a.signin_time DESC LIMIT %s", (int(limit),))
            return [_to_record(r) for r in fetchall(cur)]

    def list_pending_for_team(self, manager_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.manager_id=%s AND a.status=%s ORDER BY a.signin_time DESC",
                (int(manager_id), ApprovalStatus.PENDING.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["a.signin_time >= %s", "a.signin_time < %s"]
        params: list[object] = [start, end]

        if employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY a.signin_time ASC", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(
                    employee_id, signin_time, signin_lat, signin_lng, signin_selfie_url, status, approved_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    signin_time,
                    location.lat if location else None,
                    location.lng if location else None,
                    selfie_url,
                    status.value,
                    approved_by,
                ),
            )
            return int(cur.lastrowid)

    def update_signout(self, *, attendance_id: int, signout_time: datetime, location: GeoPoint) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET signout_time=%s, signout_lat=%s, signout_lng=%s
                WHERE attendance_id=%s AND signout_time IS NULL
                """,
                (signout_time, location.lat, location.lng, int(attendance_id)),
            )
            return cur.rowcount > 0

    def decide(self, *, attendance_id: int, status: ApprovalStatus, approved_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, approved_by=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (status.value, int(approved_by), int(attendance_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def summarize(self, day: date) -> AttendanceSummary:
        start, end = day_bounds(day)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(status=%s), 0) AS approved,
                       COALESCE(SUM(status=%s), 0) AS pending,
                       COALESCE(SUM(status=%s), 0) AS rejected,
                       COUNT(DISTINCT CASE WHEN signin_time >= %s AND signin_time < %s THEN employee_id END)
                           AS signed_in_today
                FROM attendance
                """,
                (
                    ApprovalStatus.APPROVED.value,
                    ApprovalStatus.PENDING.value,
                    ApprovalStatus.REJECTED.value,
                    start,
                    end,
                ),
            )
            r = fetchone(cur) or {}
            return AttendanceSummary(
                total=int(r.get("total") or 0),
                approved=int(r.get("approved") or 0),
                pending=int(r.get("pending") or 0),
                rejected=int(r.get("rejected") or 0),
                signed_in_today=int(r.get("signed_in_today") or 0),
            )
