from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from werkzeug.utils import secure_filename

from ..common.permissions import ADMIN_ROLES, SELF_SERVICE_ROLES, require_approver, require_role
from ..common.validators import require_non_empty
from ..core.constants import DOCUMENT_BUCKET
from ..core.enums import ApprovalStatus, LeaveType, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..storage.base import ObjectStorage
from .model import LeaveApplication, LeaveBalance, LeaveSummary, UploadedDocument, inclusive_days
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave applications, approvals and per-type balances."""

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, storage: ObjectStorage):
        self._leaves = leaves
        self._employees = employees
        self._storage = storage

    # -------- Balances --------
    def balance_for(self, employee_id: int) -> LeaveBalance:
        """Stored balance, or the defaults when the row has not been created yet."""
        return self._leaves.get_balance(int(employee_id)) or LeaveBalance.defaults(int(employee_id))

    def credit_compensatory(self, employee_id: int) -> None:
        self._leaves.credit_compensatory(int(employee_id))
        logger.info("compensatory leave credited to employee %s", employee_id)

    # -------- Applications --------
    def apply(
        self,
        *,
        current_role: Optional[Role],
        employee_id: int,
        leave_type: str | LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        document: Optional[UploadedDocument] = None,
        now: Optional[datetime] = None,
    ) -> int:
        require_role(current_role, SELF_SERVICE_ROLES, "Only employees can apply for leave")
        now = now or datetime.now()

        try:
            leave_type = LeaveType(leave_type)
        except ValueError:
            raise ValidationError(f"Unknown leave type: {leave_type}")

        if end_date < start_date:
            raise ValidationError("End date must be on or after the start date")
        reason = require_non_empty(reason, "Reason")

        days = inclusive_days(start_date, end_date)
        available = self.balance_for(employee_id).available(leave_type)
        if available < days:
            logger.warning(
                "leave refused for employee %s: %s days of %s requested, %s available",
                employee_id, days, leave_type.value, available,
            )
            raise ValidationError(f"Insufficient {leave_type.value} leave balance ({available} left, {days} requested)")

        document_url = None
        if document is not None and document.data:
            document_url = self._store_document(employee_id, document, now)

        leave_id = self._leaves.create(
            employee_id=int(employee_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            document_url=document_url,
        )
        logger.info("leave %s submitted by employee %s (%s, %s days)", leave_id, employee_id, leave_type.value, days)
        return leave_id

    def _store_document(self, employee_id: int, document: UploadedDocument, now: datetime) -> str:
        filename = secure_filename(document.filename or "") or "document"
        key = f"leave-docs/{int(employee_id)}/{int(now.timestamp() * 1000)}-{filename}"
        self._storage.upload(DOCUMENT_BUCKET, key, document.data)
        return self._storage.public_url(DOCUMENT_BUCKET, key)

    def _get_pending(self, leave_id: int) -> LeaveApplication:
        application = self._leaves.get_by_id(int(leave_id))
        if not application:
            raise NotFoundError("Leave application not found")
        if application.status != ApprovalStatus.PENDING:
            raise ValidationError("Leave application was already processed")
        return application

    def _check_reviewer(self, current_role: Optional[Role], approver_id: int, application: LeaveApplication) -> None:
        employee = self._employees.get_by_id(application.employee_id)
        require_approver(
            current_role,
            approver_id=approver_id,
            subject_manager_id=employee.manager_id if employee else None,
        )

    def approve(
        self,
        *,
        current_role: Optional[Role],
        approver_id: int,
        leave_id: int,
        now: Optional[datetime] = None,
    ) -> None:
        application = self._get_pending(leave_id)
        self._check_reviewer(current_role, approver_id, application)

        ok = self._leaves.approve_and_deduct(
            leave_id=application.leave_id,
            employee_id=application.employee_id,
            leave_type=application.leave_type,
            days=application.days,
            approved_by=int(approver_id),
            approved_at=now or datetime.now(),
        )
        if not ok:
            raise ValidationError("Leave application was already processed")
        logger.info(
            "leave %s approved by %s: %s %s days deducted from employee %s",
            application.leave_id, approver_id, application.days, application.leave_type.value, application.employee_id,
        )

    def reject(
        self,
        *,
        current_role: Optional[Role],
        approver_id: int,
        leave_id: int,
        now: Optional[datetime] = None,
    ) -> None:
        application = self._get_pending(leave_id)
        self._check_reviewer(current_role, approver_id, application)

        if not self._leaves.reject(leave_id=application.leave_id, approved_by=int(approver_id), approved_at=now or datetime.now()):
            raise ValidationError("Leave application was already processed")
        logger.info("leave %s rejected by %s", application.leave_id, approver_id)

    # -------- Listings --------
    def my_leaves(self, employee_id: int) -> Sequence[LeaveApplication]:
        return self._leaves.list_for_employee(int(employee_id))

    def pending_for_team(self, manager_id: int) -> Sequence[LeaveApplication]:
        return self._leaves.list_pending_for_team(int(manager_id))

    def all_applications(self, *, current_role: Optional[Role], limit: int = 200) -> Sequence[LeaveApplication]:
        require_role(current_role, ADMIN_ROLES)
        return self._leaves.list_all(limit=limit)

    def summary(self, *, current_role: Optional[Role]) -> LeaveSummary:
        require_role(current_role, ADMIN_ROLES)
        return self._leaves.summarize()
