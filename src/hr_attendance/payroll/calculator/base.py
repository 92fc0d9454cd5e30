from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ...attendance.model import AttendanceRecord


@dataclass(frozen=True)
class SalaryBreakdown:
    basic_pay: Decimal
    hra: Decimal
    conveyance: Decimal
    medical_allowance: Decimal
    professional_tax: Decimal
    provident_fund: Decimal
    gross: Decimal
    total_deductions: Decimal
    net: Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(self) -> SalaryBreakdown:
        raise NotImplementedError

    @abstractmethod
    def worked_hours(self, record: AttendanceRecord) -> float:
        raise NotImplementedError
