from datetime import date

import pytest

from hr_attendance.core.enums import ApprovalStatus, LeaveType, Role
from hr_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from hr_attendance.leaves.model import LeaveBalance, UploadedDocument, inclusive_days


def _apply(leave_service, start=date(2026, 4, 6), end=date(2026, 4, 8), leave_type="casual", **kwargs):
    return leave_service.apply(
        current_role=kwargs.pop("current_role", Role.EMPLOYEE),
        employee_id=kwargs.pop("employee_id", 4),
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        reason=kwargs.pop("reason", "Family function"),
        **kwargs,
    )


def test_inclusive_days():
    assert inclusive_days(date(2026, 4, 6), date(2026, 4, 6)) == 1
    assert inclusive_days(date(2026, 4, 6), date(2026, 4, 8)) == 3


def test_missing_balance_row_reads_as_defaults(leave_service):
    balance = leave_service.balance_for(4)
    assert balance.stored is False
    assert balance == LeaveBalance.defaults(4)
    assert balance.available(LeaveType.CASUAL) == 12
    assert balance.available(LeaveType.SICK) == 10
    assert balance.available(LeaveType.EARNED) == 15
    assert balance.available(LeaveType.COMPENSATORY) == 0


def test_approval_deducts_inclusive_days(leave_service, leaves_repo):
    leave_id = _apply(leave_service)
    leave_service.approve(current_role=Role.MANAGER, approver_id=3, leave_id=leave_id)

    assert leaves_repo.get_by_id(leave_id).status == ApprovalStatus.APPROVED
    assert leave_service.balance_for(4).available(LeaveType.CASUAL) == 9


def test_deduction_is_floored_at_zero(leave_service, leaves_repo):
    leave_id = _apply(leave_service)
    # Balance drops after submission but before the decision.
    leaves_repo.balances[4] = {t: 0 for t in LeaveType}
    leaves_repo.balances[4][LeaveType.CASUAL] = 1

    leave_service.approve(current_role=Role.ADMIN, approver_id=1, leave_id=leave_id)
    assert leave_service.balance_for(4).available(LeaveType.CASUAL) == 0


def test_rejection_leaves_balance_untouched(leave_service, leaves_repo):
    leave_id = _apply(leave_service)
    leave_service.reject(current_role=Role.HR, approver_id=2, leave_id=leave_id)

    assert leaves_repo.get_by_id(leave_id).status == ApprovalStatus.REJECTED
    assert leaves_repo.get_balance(4) is None
    assert leave_service.balance_for(4).available(LeaveType.CASUAL) == 12


def test_second_decision_is_refused(leave_service):
    leave_id = _apply(leave_service)
    leave_service.approve(current_role=Role.MANAGER, approver_id=3, leave_id=leave_id)

    with pytest.raises(ValidationError, match="already processed"):
        leave_service.approve(current_role=Role.MANAGER, approver_id=3, leave_id=leave_id)
    assert leave_service.balance_for(4).available(LeaveType.CASUAL) == 9


def test_insufficient_balance(leave_service, leaves_repo):
    with pytest.raises(ValidationError, match="Insufficient compensatory leave balance"):
        _apply(leave_service, leave_type="compensatory", start=date(2026, 4, 6), end=date(2026, 4, 6))
    assert leaves_repo.applications == {}


def test_end_before_start(leave_service):
    with pytest.raises(ValidationError):
        _apply(leave_service, start=date(2026, 4, 8), end=date(2026, 4, 6))


def test_unknown_leave_type(leave_service):
    with pytest.raises(ValidationError):
        _apply(leave_service, leave_type="sabbatical")


def test_only_self_service_roles_apply(leave_service):
    with pytest.raises(AuthorizationError):
        _apply(leave_service, current_role=Role.MANAGER, employee_id=3)


def test_other_team_manager_cannot_review(leave_service, leaves_repo):
    leave_id = _apply(leave_service)
    with pytest.raises(AuthorizationError):
        leave_service.approve(current_role=Role.MANAGER, approver_id=6, leave_id=leave_id)
    assert leaves_repo.get_by_id(leave_id).status == ApprovalStatus.PENDING


def test_review_unknown_application(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.reject(current_role=Role.ADMIN, approver_id=1, leave_id=42)


def test_supporting_document_is_stored(leave_service, leaves_repo, storage):
    leave_id = _apply(leave_service, document=UploadedDocument(filename="../medical note.pdf", data=b"%PDF-1.4"))

    url = leaves_repo.get_by_id(leave_id).document_url
    assert url.startswith("/storage/employee-documents/leave-docs/4/")
    assert url.endswith("-medical_note.pdf")
    assert len(list((storage.root / "employee-documents" / "leave-docs" / "4").iterdir())) == 1


def test_pending_for_team(leave_service):
    _apply(leave_service)
    assert [a.employee_id for a in leave_service.pending_for_team(3)] == [4]
    assert leave_service.pending_for_team(6) == []


def test_summary_counts_by_status(leave_service):
    approved = _apply(leave_service)
    rejected = _apply(leave_service, start=date(2026, 5, 4), end=date(2026, 5, 4))
    _apply(leave_service, start=date(2026, 6, 1), end=date(2026, 6, 1))
    leave_service.approve(current_role=Role.MANAGER, approver_id=3, leave_id=approved)
    leave_service.reject(current_role=Role.MANAGER, approver_id=3, leave_id=rejected)

    summary = leave_service.summary(current_role=Role.ADMIN)
    assert (summary.total, summary.approved, summary.pending, summary.rejected) == (3, 1, 1, 1)

    with pytest.raises(AuthorizationError):
        leave_service.summary(current_role=Role.EMPLOYEE)
