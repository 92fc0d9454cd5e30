import pytest

from hr_attendance.core.exceptions import ValidationError


def test_upload_and_public_url(storage):
    storage.upload("employee-documents", "leave-docs/4/note.pdf", b"data")
    assert (storage.root / "employee-documents" / "leave-docs" / "4" / "note.pdf").read_bytes() == b"data"
    assert storage.public_url("employee-documents", "leave-docs/4/note.pdf") == "/storage/employee-documents/leave-docs/4/note.pdf"


@pytest.mark.parametrize("key", ["../escape.txt", "a/../../b", "/etc/passwd", ""])
def test_traversal_is_rejected(storage, key):
    with pytest.raises(ValidationError):
        storage.upload("employee-documents", key, b"x")


def test_objects_are_served_public_read(client, storage):
    storage.upload("employee-selfies", "attendance-selfies/4/1.png", b"png")
    resp = client.get("/storage/employee-selfies/attendance-selfies/4/1.png")
    assert resp.status_code == 200
    assert resp.data == b"png"
    assert client.get("/storage/employee-selfies/missing.png").status_code == 404
