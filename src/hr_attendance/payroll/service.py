from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..app_settings.repository import AppSettingsRepository
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import day_bounds, parse_month
from ..common.permissions import ADMIN_ROLES, require_role
from ..core.enums import ApprovalStatus, Role
from ..core.exceptions import NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import SalaryBreakdown, SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalarySlip:
    company_name: str
    employee: Employee
    month: str
    period_start: date
    breakdown: SalaryBreakdown
    total_days: int
    total_hours: float
    records: Sequence[AttendanceRecord]


class SalarySlipService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        app_settings: AppSettingsRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
        default_company_name: str = "VTC Attendance App",
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = app_settings
        self._calculator = calculator or StandardSalaryCalculator()
        self._default_company_name = default_company_name

    def company_name(self) -> str:
        return self._settings.get("company_name") or self._default_company_name

    def build_slip(self, *, current_role: Optional[Role], employee_id: int, month: str) -> SalarySlip:
        """Payslip for one employee and calendar month (``YYYY-MM``) from approved attendance."""

        require_role(current_role, ADMIN_ROLES, "Only admin or HR can generate salary slips")
        start, end = parse_month(month)

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        range_start, _ = day_bounds(start)
        range_end, _ = day_bounds(end)
        records = list(
            self._attendance.list_in_range(
                start=range_start,
                end=range_end,
                employee_id=employee.employee_id,
                status=ApprovalStatus.APPROVED,
            )
        )

        total_hours = sum((self._calculator.worked_hours(r) for r in records), 0.0)
        logger.info("salary slip built for employee %s, %s (%s records)", employee.employee_id, month, len(records))

        return SalarySlip(
            company_name=self.company_name(),
            employee=employee,
            month=start.strftime("%Y-%m"),
            period_start=start,
            breakdown=self._calculator.compute(),
            total_days=len(records),
            total_hours=round(total_hours, 2),
            records=records,
        )
