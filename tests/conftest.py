from __future__ import annotations

import io
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from hr_attendance.attendance.model import AttendanceRecord, AttendanceSummary, GeoPoint
from hr_attendance.attendance.service import AttendanceService
from hr_attendance.container import Container
from hr_attendance.core.constants import DEFAULT_LEAVE_BALANCE
from hr_attendance.core.enums import ApprovalStatus, LeaveType, Role
from hr_attendance.employees.model import Employee
from hr_attendance.employees.service import AuthService, EmployeeService
from hr_attendance.holidays.model import Holiday
from hr_attendance.holidays.service import HolidayService
from hr_attendance.leaves.model import LeaveApplication, LeaveBalance, LeaveSummary
from hr_attendance.leaves.service import LeaveService
from hr_attendance.payroll.service import SalarySlipService
from hr_attendance.storage.local_storage import LocalObjectStorage


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._by_id: dict[int, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self._by_id[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.email == email), None)

    def create(self, *, full_name, email, password_hash, role, department, manager_id) -> int:
        employee_id = max(self._by_id, default=0) + 1
        self._by_id[employee_id] = Employee(
            employee_id=employee_id,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
            manager_id=manager_id,
        )
        return employee_id

    def update_assignment(self, employee_id: int, *, role, manager_id) -> None:
        self._by_id[employee_id] = replace(self._by_id[employee_id], role=role, manager_id=manager_id)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda e: e.full_name)

    def list_team(self, manager_id: int):
        return [e for e in self.list_all() if e.manager_id == manager_id]


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _named(self, record: AttendanceRecord) -> AttendanceRecord:
        employee = self._employees.get_by_id(record.employee_id)
        return replace(record, employee_name=employee.full_name if employee else None)

    def _for_employee_on(self, employee_id: int, day: date):
        items = [r for r in self.records.values() if r.employee_id == employee_id and r.signin_time.date() == day]
        return sorted(items, key=lambda r: r.signin_time, reverse=True)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        record = self.records.get(attendance_id)
        return self._named(record) if record else None

    def get_open_for_employee_on(self, employee_id: int, day: date):
        return next((r for r in self._for_employee_on(employee_id, day) if r.is_open and r.signin_selfie_url), None)

    def get_latest_for_employee_on(self, employee_id: int, day: date):
        items = self._for_employee_on(employee_id, day)
        return items[0] if items else None

    def list_recent_for_employee(self, employee_id: int, limit: int):
        items = [r for r in self.records.values() if r.employee_id == employee_id]
        return sorted(items, key=lambda r: r.signin_time, reverse=True)[:limit]

    def list_recent(self, limit: int):
        return [self._named(r) for r in sorted(self.records.values(), key=lambda r: r.signin_time, reverse=True)[:limit]]

    def list_pending_for_team(self, manager_id: int):
        team = {e.employee_id for e in self._employees.list_team(manager_id)}
        return [
            self._named(r)
            for r in self.records.values()
            if r.employee_id in team and r.status == ApprovalStatus.PENDING
        ]

    def list_in_range(self, *, start, end, employee_id=None, status=None):
        return [
            self._named(r)
            for r in sorted(self.records.values(), key=lambda r: r.signin_time)
            if start <= r.signin_time < end
            and (employee_id is None or r.employee_id == employee_id)
            and (status is None or r.status == status)
        ]

    def summarize(self, day: date) -> AttendanceSummary:
        records = list(self.records.values())
        return AttendanceSummary(
            total=len(records),
            approved=sum(r.status == ApprovalStatus.APPROVED for r in records),
            pending=sum(r.status == ApprovalStatus.PENDING for r in records),
            rejected=sum(r.status == ApprovalStatus.REJECTED for r in records),
            signed_in_today=len({r.employee_id for r in records if r.signin_time.date() == day}),
        )

    def create_signin(self, *, employee_id, signin_time, location, selfie_url, status, approved_by=None) -> int:
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            employee_id=employee_id,
            signin_time=signin_time,
            status=status,
            signin_location=location,
            signin_selfie_url=selfie_url,
            approved_by=approved_by,
        )
        return self._id

    def update_signout(self, *, attendance_id, signout_time, location) -> bool:
        record = self.records.get(attendance_id)
        if not record or record.signout_time is not None:
            return False
        self.records[attendance_id] = replace(record, signout_time=signout_time, signout_location=location)
        return True

    def decide(self, *, attendance_id, status, approved_by) -> bool:
        record = self.records.get(attendance_id)
        if not record or record.status != ApprovalStatus.PENDING:
            return False
        self.records[attendance_id] = replace(record, status=status, approved_by=approved_by)
        return True


class InMemoryLeaves:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.applications: dict[int, LeaveApplication] = {}
        self.balances: dict[int, dict[LeaveType, int]] = {}
        self._id = 0

    def create(self, *, employee_id, leave_type, start_date, end_date, reason, document_url) -> int:
        self._id += 1
        self.applications[self._id] = LeaveApplication(
            leave_id=self._id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=ApprovalStatus.PENDING,
            applied_at=datetime(2026, 1, 1),
            document_url=document_url,
        )
        return self._id

    def get_by_id(self, leave_id: int):
        return self.applications.get(leave_id)

    def list_for_employee(self, employee_id: int):
        return [a for a in self.applications.values() if a.employee_id == employee_id]

    def list_pending_for_team(self, manager_id: int):
        team = {e.employee_id for e in self._employees.list_team(manager_id)}
        return [a for a in self.applications.values() if a.employee_id in team and a.status == ApprovalStatus.PENDING]

    def list_all(self, *, limit: int = 200):
        return list(self.applications.values())[:limit]

    def _counters(self, employee_id: int) -> dict[LeaveType, int]:
        if employee_id not in self.balances:
            self.balances[employee_id] = {t: DEFAULT_LEAVE_BALANCE[t.value] for t in LeaveType}
        return self.balances[employee_id]

    def approve_and_deduct(self, *, leave_id, employee_id, leave_type, days, approved_by, approved_at) -> bool:
        application = self.applications.get(leave_id)
        if not application or application.status != ApprovalStatus.PENDING:
            return False
        self.applications[leave_id] = replace(
            application, status=ApprovalStatus.APPROVED, approved_by=approved_by, approved_at=approved_at
        )
        counters = self._counters(employee_id)
        counters[leave_type] = max(0, counters[leave_type] - days)
        return True

    def reject(self, *, leave_id, approved_by, approved_at) -> bool:
        application = self.applications.get(leave_id)
        if not application or application.status != ApprovalStatus.PENDING:
            return False
        self.applications[leave_id] = replace(
            application, status=ApprovalStatus.REJECTED, approved_by=approved_by, approved_at=approved_at
        )
        return True

    def summarize(self) -> LeaveSummary:
        applications = list(self.applications.values())
        return LeaveSummary(
            total=len(applications),
            approved=sum(a.status == ApprovalStatus.APPROVED for a in applications),
            pending=sum(a.status == ApprovalStatus.PENDING for a in applications),
            rejected=sum(a.status == ApprovalStatus.REJECTED for a in applications),
        )

    def get_balance(self, employee_id: int):
        if employee_id not in self.balances:
            return None
        return LeaveBalance(employee_id=employee_id, counters=dict(self.balances[employee_id]))

    def credit_compensatory(self, employee_id: int) -> None:
        counters = self._counters(employee_id)
        counters[LeaveType.COMPENSATORY] += 1


class InMemoryHolidays:
    def __init__(self, holidays=()):
        self._by_id: dict[int, Holiday] = {h.holiday_id: h for h in holidays}

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda h: h.holiday_date)

    def get_by_date(self, day: date):
        return next((h for h in self._by_id.values() if h.holiday_date == day), None)

    def create(self, *, holiday_date, name, description) -> int:
        holiday_id = max(self._by_id, default=0) + 1
        self._by_id[holiday_id] = Holiday(holiday_id, holiday_date, name, description)
        return holiday_id

    def delete(self, holiday_id: int) -> bool:
        return self._by_id.pop(holiday_id, None) is not None


class InMemorySettings:
    def __init__(self, values=None):
        self._values = dict(values or {})

    def get(self, key: str):
        return self._values.get(key)


def make_employee(employee_id: int, role: Role, *, manager_id=None, password="secret1", name=None) -> Employee:
    return Employee(
        employee_id=employee_id,
        full_name=name or f"{role.value.title()} {employee_id}",
        email=f"{role.value}{employee_id}@example.com",
        password_hash=generate_password_hash(password),
        role=role,
        manager_id=manager_id,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def selfie_png() -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 120, 80)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def office() -> GeoPoint:
    return GeoPoint(lat=12.9716, lng=77.5946)


@pytest.fixture
def employees() -> InMemoryEmployees:
    # 1 admin, 2 hr, 3 manager, 4 employee reporting to 3, 5 employee with no manager, 6 other manager
    return InMemoryEmployees(
        [
            make_employee(1, Role.ADMIN),
            make_employee(2, Role.HR),
            make_employee(3, Role.MANAGER),
            make_employee(4, Role.EMPLOYEE, manager_id=3),
            make_employee(5, Role.TEMP_VENDOR),
            make_employee(6, Role.MANAGER),
        ]
    )


@pytest.fixture
def attendance_repo(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def leaves_repo(employees) -> InMemoryLeaves:
    return InMemoryLeaves(employees)


@pytest.fixture
def holidays_repo() -> InMemoryHolidays:
    return InMemoryHolidays()


@pytest.fixture
def storage(tmp_path) -> LocalObjectStorage:
    return LocalObjectStorage(tmp_path / "storage")


@pytest.fixture
def leave_service(leaves_repo, employees, storage) -> LeaveService:
    return LeaveService(leaves_repo, employees, storage)


@pytest.fixture
def holiday_service(holidays_repo) -> HolidayService:
    return HolidayService(holidays_repo)


@pytest.fixture
def attendance_service(attendance_repo, employees, holiday_service, leave_service, storage) -> AttendanceService:
    return AttendanceService(attendance_repo, employees, holiday_service, leave_service, storage)


@pytest.fixture
def container(employees, attendance_repo, attendance_service, leave_service, holiday_service, storage) -> Container:
    return Container(
        storage=storage,
        auth_service=AuthService(employees),
        employee_service=EmployeeService(employees),
        attendance_service=attendance_service,
        leave_service=leave_service,
        holiday_service=holiday_service,
        salary_slip_service=SalarySlipService(
            attendance_repo,
            employees,
            InMemorySettings({"company_name": "Acme Corp"}),
        ),
    )


@pytest.fixture
def app(monkeypatch, container):
    from hr_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    def _login(employee_id: int, role) -> None:
        with client.session_transaction() as sess:
            sess["employee_id"] = employee_id
            sess["name"] = f"Employee {employee_id}"
            sess["role"] = role

    return _login
