from __future__ import annotations

from ...attendance.model import AttendanceRecord, worked_hours
from ...core import constants
from .base import SalaryBreakdown, SalaryCalculator


class StandardSalaryCalculator(SalaryCalculator):
    """Fixed formula: basic + 40% HRA + conveyance + medical, less professional tax and 12% PF.

    Attendance does not change the pay; it only feeds the descriptive totals.
    """

    def __init__(
        self,
        *,
        basic_pay=constants.BASIC_PAY,
        hra_rate=constants.HRA_RATE,
        conveyance=constants.CONVEYANCE_ALLOWANCE,
        medical_allowance=constants.MEDICAL_ALLOWANCE,
        professional_tax=constants.PROFESSIONAL_TAX,
        pf_rate=constants.PROVIDENT_FUND_RATE,
    ):
        self._basic_pay = basic_pay
        self._hra_rate = hra_rate
        self._conveyance = conveyance
        self._medical_allowance = medical_allowance
        self._professional_tax = professional_tax
        self._pf_rate = pf_rate

    def compute(self) -> SalaryBreakdown:
        hra = self._basic_pay * self._hra_rate
        pf = self._basic_pay * self._pf_rate
        gross = self._basic_pay + hra + self._conveyance + self._medical_allowance
        deductions = self._professional_tax + pf
        return SalaryBreakdown(
            basic_pay=self._basic_pay,
            hra=hra,
            conveyance=self._conveyance,
            medical_allowance=self._medical_allowance,
            professional_tax=self._professional_tax,
            provident_fund=pf,
            gross=gross,
            total_deductions=deductions,
            net=gross - deductions,
        )

    def worked_hours(self, record: AttendanceRecord) -> float:
        # Records without a sign-out contribute no hours.
        return worked_hours(record.signin_time, record.signout_time) or 0.0
