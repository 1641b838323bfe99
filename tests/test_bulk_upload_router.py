"""
tests/test_bulk_upload_router.py

HTTP contract of the bulk-upload router, served from a bare FastAPI app with
the database and services overridden.
"""

from __future__ import annotations

import uuid

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers.bulk_upload import router
from app.services.bulk_import_service import get_bulk_import_service
from app.services.invitation_service import InvitationService, get_invitation_service
from app.services.upload_report_service import UploadReportService, get_upload_report_service
from db.repositories import IdentityRepository
from db.session import get_db

STUDENT_CSV = (
    "Full Name,Email,Roll Number,Degree,Branch,Year\n"
    "John Doe,john.doe@college.edu,CS2024001,B.Tech,Computer Science,3\n"
    "John Again,john.doe@college.edu,CS2024002,B.Tech,Computer Science,3\n"
    "Jane Roe,jane.roe@college.edu,CS2024003,B.Tech,Electronics,2\n"
)


@pytest.fixture()
def client(db_session, import_service, notifier):
    application = FastAPI()
    application.include_router(router)

    def _get_db():
        yield db_session

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_bulk_import_service] = lambda: import_service
    application.dependency_overrides[get_upload_report_service] = lambda: UploadReportService()
    application.dependency_overrides[get_invitation_service] = lambda: InvitationService(
        notification_sender=notifier
    )

    with TestClient(application) as test_client:
        yield test_client


def _upload(client: TestClient, college, admin, content: str, *, path="/admin/students/bulk-upload", filename="students.csv", content_type="text/csv"):
    return client.post(
        path,
        params={"college_id": str(college.id), "uploaded_by": str(admin.id)},
        files={"file": (filename, content.encode("utf-8"), content_type)},
    )


def test_student_upload_returns_summary(client, college, admin) -> None:
    response = _upload(client, college, admin, STUDENT_CSV)

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "COMPLETED"
    assert payload["entity_type"] == "STUDENT"
    assert (payload["total_rows"], payload["successful_rows"], payload["failed_rows"]) == (3, 2, 1)
    assert payload["errors"] == [
        {
            "row_number": 2,
            "message": "Email already exists: john.doe@college.edu",
            "row_data": {"email": "john.doe@college.edu", "name": "John Again"},
        }
    ]


def test_trainer_upload(client, college, admin) -> None:
    response = _upload(
        client,
        college,
        admin,
        "Full Name,Email,Department,Specialization\nDr. Robert Smith,robert.smith@college.edu,CS,ML\n",
        path="/admin/trainers/bulk-upload",
        filename="trainers.csv",
    )

    assert response.status_code == 200
    assert response.json()["entity_type"] == "TRAINER"


def test_non_csv_upload_is_rejected_before_batch(client, college, admin) -> None:
    response = _upload(client, college, admin, "hello", filename="roster.pdf", content_type="application/pdf")

    assert response.status_code == 400
    assert response.json()["detail"] == "File must be a CSV"
    history = client.get("/admin/bulk-uploads", params={"college_id": str(college.id)})
    assert history.json()["uploads"] == []


def test_structural_error_returns_upload_id(client, college, admin) -> None:
    response = _upload(client, college, admin, "Full Name,Roll Number\nJohn Doe,CS1\n")

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Missing required CSV header(s): Email"

    batch = client.get(f"/admin/bulk-uploads/{detail['upload_id']}").json()
    assert batch["status"] == "FAILED"
    assert batch["error_report"] == "Missing required CSV header(s): Email"


def test_unknown_college_returns_404(client, admin) -> None:
    response = client.post(
        "/admin/students/bulk-upload",
        params={"college_id": str(uuid.uuid4()), "uploaded_by": str(admin.id)},
        files={"file": ("students.csv", STUDENT_CSV.encode("utf-8"), "text/csv")},
    )

    assert response.status_code == 404


def test_history_and_results_endpoints(client, college, admin) -> None:
    upload_id = _upload(client, college, admin, STUDENT_CSV).json()["upload_id"]

    history = client.get("/admin/bulk-uploads", params={"college_id": str(college.id)}).json()
    assert [item["upload_id"] for item in history["uploads"]] == [upload_id]
    assert (history["total"], history["limit"], history["offset"]) == (1, 100, 0)

    results = client.get(f"/admin/bulk-uploads/{upload_id}/results").json()
    assert results["counts"] == {"SUCCESS": 2, "FAILED": 1, "SKIPPED": 0}
    assert [row["row_number"] for row in results["results"]] == [1, 2, 3]

    failed = client.get(f"/admin/bulk-uploads/{upload_id}/results", params={"status": "FAILED"}).json()
    assert [row["row_number"] for row in failed["results"]] == [2]

    bad_filter = client.get(f"/admin/bulk-uploads/{upload_id}/results", params={"status": "LOST"})
    assert bad_filter.status_code == 400


def test_unknown_upload_returns_404(client) -> None:
    assert client.get(f"/admin/bulk-uploads/{uuid.uuid4()}").status_code == 404
    assert client.get(f"/admin/bulk-uploads/{uuid.uuid4()}/results").status_code == 404


def test_template_download(client) -> None:
    response = client.get("/admin/trainers/bulk-upload/template")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="trainer_template.csv"' in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == "Full Name,Email,Department,Specialization"


def test_resend_invitation_flow(client, college, admin) -> None:
    upload_id = _upload(client, college, admin, STUDENT_CSV).json()["upload_id"]
    results = client.get(f"/admin/bulk-uploads/{upload_id}/results", params={"status": "SUCCESS"}).json()
    user_id = results["results"][0]["user_id"]

    response = client.post(f"/admin/students/{user_id}/resend-invitation")
    assert response.status_code == 200
    assert response.json()["user_id"] == user_id

    assert client.post(f"/admin/trainers/{user_id}/resend-invitation").status_code == 404
    assert client.post(f"/admin/students/{uuid.uuid4()}/resend-invitation").status_code == 404


def test_resend_for_active_account_returns_409(client, db_session, college, admin) -> None:
    upload_id = _upload(client, college, admin, STUDENT_CSV).json()["upload_id"]
    user_id = client.get(f"/admin/bulk-uploads/{upload_id}/results", params={"status": "SUCCESS"}).json()["results"][0]["user_id"]
    identities = IdentityRepository(db_session)
    identities.activate(identities.get_user(uuid.UUID(user_id)))
    db_session.commit()

    response = client.post(f"/admin/students/{user_id}/resend-invitation")

    assert response.status_code == 409


def test_resend_dispatch_failure_returns_502(client, college, admin, notifier) -> None:
    upload_id = _upload(client, college, admin, STUDENT_CSV).json()["upload_id"]
    user_id = client.get(f"/admin/bulk-uploads/{upload_id}/results", params={"status": "SUCCESS"}).json()["results"][0]["user_id"]
    notifier.fail_for.add("john.doe@college.edu")

    response = client.post(f"/admin/students/{user_id}/resend-invitation")

    assert response.status_code == 502


def test_history_pages_report_total(client, college, admin) -> None:
    upload_ids = [
        _upload(client, college, admin, STUDENT_CSV).json()["upload_id"] for _ in range(3)
    ]

    first = client.get("/admin/bulk-uploads", params={"college_id": str(college.id), "limit": 2}).json()
    second = client.get("/admin/bulk-uploads", params={"college_id": str(college.id), "limit": 2, "offset": 2}).json()

    assert first["total"] == second["total"] == 3
    assert [item["upload_id"] for item in first["uploads"] + second["uploads"]] == list(reversed(upload_ids))
    assert client.get("/admin/bulk-uploads", params={"college_id": str(college.id), "offset": -1}).status_code == 422
