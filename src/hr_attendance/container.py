from __future__ import annotations

from dataclasses import dataclass

from .app_settings.mysql_app_settings_repository import MySQLAppSettingsRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import AuthService, EmployeeService
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.service import SalarySlipService
from .storage.local_storage import LocalObjectStorage


@dataclass(frozen=True)
class Container:
    storage: LocalObjectStorage

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    holiday_service: HolidayService
    salary_slip_service: SalarySlipService


def build_container(*, db_config: dict, upload_root: str, company_name: str = "VTC Attendance App") -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    storage = LocalObjectStorage(upload_root)

    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    settings_repo = MySQLAppSettingsRepository(conn)

    holiday_service = HolidayService(holidays_repo)
    leave_service = LeaveService(leaves_repo, employees_repo, storage)

    return Container(
        storage=storage,
        auth_service=AuthService(employees_repo),
        employee_service=EmployeeService(employees_repo),
        attendance_service=AttendanceService(attendance_repo, employees_repo, holiday_service, leave_service, storage),
        leave_service=leave_service,
        holiday_service=holiday_service,
        salary_slip_service=SalarySlipService(
            attendance_repo,
            employees_repo,
            settings_repo,
            default_company_name=company_name,
        ),
    )
