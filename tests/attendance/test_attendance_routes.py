import base64
import io

from hr_attendance.core.enums import ApprovalStatus


def test_sign_in_with_uploaded_selfie(client, login_as, attendance_repo, selfie_png):
    login_as(4, "employee")
    resp = client.post(
        "/attendance/sign-in",
        data={"selfie": (io.BytesIO(selfie_png), "selfie.png"), "lat": "12.97", "lng": "77.59"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/me")
    [record] = attendance_repo.records.values()
    assert record.status == ApprovalStatus.PENDING


def test_sign_in_with_canvas_capture(client, login_as, attendance_repo, selfie_png):
    login_as(4, "employee")
    data_url = "data:image/png;base64," + base64.b64encode(selfie_png).decode("ascii")
    client.post("/attendance/sign-in", data={"selfie_data": data_url, "lat": "12.97", "lng": "77.59"})
    assert len(attendance_repo.records) == 1


def test_sign_in_without_location_is_flashed(client, login_as, attendance_repo, selfie_png):
    login_as(4, "employee")
    resp = client.post(
        "/attendance/sign-in",
        data={"selfie": (io.BytesIO(selfie_png), "selfie.png")},
        content_type="multipart/form-data",
        follow_redirects=True,
    )
    assert b"Please allow location access" in resp.data
    assert attendance_repo.records == {}


def test_manager_approves_from_dashboard(client, login_as, attendance_repo, fixed_now):
    attendance_id = attendance_repo.create_signin(
        employee_id=4, signin_time=fixed_now, location=None, selfie_url=None, status=ApprovalStatus.PENDING
    )
    login_as(3, "manager")
    resp = client.post(f"/attendance/{attendance_id}/approve")
    assert resp.status_code == 302
    assert attendance_repo.get_by_id(attendance_id).status == ApprovalStatus.APPROVED


def test_csv_export(client, login_as, attendance_repo, fixed_now):
    attendance_repo.create_signin(
        employee_id=4, signin_time=fixed_now, location=None, selfie_url=None, status=ApprovalStatus.PENDING
    )
    login_as(2, "hr")
    resp = client.get("/admin/attendance.csv?start=2026-03-01&end=2026-03-31")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("attendance_id,employee_id,employee_name,date")
    assert "Employee 4,2026-03-10" in text


def test_csv_export_forbidden_for_employee(client, login_as):
    login_as(4, "employee")
    assert client.get("/admin/attendance.csv").status_code == 403
