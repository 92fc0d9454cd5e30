import io

from hr_attendance.core.enums import ApprovalStatus, LeaveType


def test_apply_and_approve_over_http(client, login_as, leaves_repo):
    login_as(4, "employee")
    resp = client.post(
        "/leaves",
        data={
            "leave_type": "sick",
            "start_date": "2026-04-06",
            "end_date": "2026-04-07",
            "reason": "Fever",
            "document": (io.BytesIO(b"%PDF-1.4"), "note.pdf"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 302
    [application] = leaves_repo.applications.values()
    assert application.document_url is not None

    login_as(3, "manager")
    client.post(f"/leaves/{application.leave_id}/approve")
    assert leaves_repo.get_by_id(application.leave_id).status == ApprovalStatus.APPROVED
    assert leaves_repo.get_balance(4).available(LeaveType.SICK) == 8


def test_temp_vendor_cannot_review(client, login_as):
    login_as(5, "temp_vendor")
    assert client.post("/leaves/1/approve").status_code == 403
