"""
tests/test_api_routes.py

HTTP contract of the upload, policy and scheduled-post routes.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.api import dependencies
from app.config import CSVIngestionSettings
from app.main import app
from app.services.batch_runner import BatchRunner
from app.services.ingestion_worker import IngestionWorkerPool
from app.services.policy_query_service import PolicyQueryService, get_policy_query_service
from app.services.scheduled_post_service import ScheduledPostService, get_scheduled_post_service
from app.services.upload_ingestion_service import UploadIngestionService, get_upload_ingestion_service
from db.session import get_db


@pytest.fixture()
def client(session_factory: sessionmaker[Session]) -> Iterator[TestClient]:
    runner = BatchRunner(session_factory=session_factory)
    pool = IngestionWorkerPool(runner=runner, max_workers=1)
    upload_service = UploadIngestionService(
        session_factory=session_factory,
        worker_pool=pool,
        runner=runner,
        max_upload_bytes=1024 * 1024,
    )

    def _get_db() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_upload_ingestion_service] = lambda: upload_service
    app.dependency_overrides[get_policy_query_service] = PolicyQueryService
    app.dependency_overrides[get_scheduled_post_service] = lambda: ScheduledPostService(
        local_timezone=ZoneInfo("UTC")
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        pool.shutdown(wait=True)


def _post_csv(client: TestClient, payload: bytes, filename: str = "policies.csv"):  # noqa: ANN202
    return client.post("/api/upload", files={"file": (filename, payload, "text/csv")})


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestUpload:
    def test_success_returns_stats_and_job_id(self, client: TestClient, write_csv, make_row) -> None:
        response = _post_csv(client, write_csv([make_row()]).read_bytes())

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "File processed successfully"
        assert body["stats"] == {
            "agents": 1,
            "users": 1,
            "accounts": 1,
            "categories": 1,
            "carriers": 1,
            "policies": 1,
        }

        job = client.get(f"/api/ingestion-jobs/{body['job_id']}")
        assert job.status_code == 200
        assert job.json()["status"] == "completed"

    def test_malformed_csv_is_422_with_error_payload(self, client: TestClient) -> None:
        response = _post_csv(client, b"policy_number,firstname\nPN-1\n")

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["stage"] == "stream"
        assert error["row_number"] == 2

    def test_persistence_failure_is_500(self, client: TestClient, write_csv, make_row) -> None:
        response = _post_csv(client, write_csv([make_row(agent="")]).read_bytes())

        assert response.status_code == 500
        assert response.json()["error"]["stage"] == "persistence"

    def test_missing_file_is_400(self, client: TestClient) -> None:
        response = client.post("/api/upload")

        assert response.status_code == 400

    def test_non_csv_file_is_400(self, client: TestClient) -> None:
        response = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["detail"] == "Only CSV files are allowed."

    def test_csv_content_type_with_charset_is_accepted(self, client: TestClient, write_csv, make_row) -> None:
        response = client.post(
            "/api/upload",
            files={"file": ("export", write_csv([make_row()]).read_bytes(), "text/csv; charset=utf-8")},
        )

        assert response.status_code == 200

    def test_upload_over_size_limit_is_413(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch, write_csv, make_row
    ) -> None:
        monkeypatch.setattr(
            dependencies,
            "get_csv_ingestion_settings",
            lambda: CSVIngestionSettings(max_upload_bytes=16),
        )

        response = _post_csv(client, write_csv([make_row()]).read_bytes())

        assert response.status_code == 413
        assert client.get("/api/ingestion-jobs").json()["jobs"] == []

    def test_unknown_job_is_404(self, client: TestClient) -> None:
        response = client.get(f"/api/ingestion-jobs/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_jobs_list(self, client: TestClient, write_csv, make_row) -> None:
        _post_csv(client, write_csv([make_row()]).read_bytes())

        response = client.get("/api/ingestion-jobs", params={"limit": 5})

        assert response.status_code == 200
        assert len(response.json()["jobs"]) == 1


class TestPolicies:
    @pytest.fixture(autouse=True)
    def _seed(self, client: TestClient, write_csv, make_row) -> None:
        rows = [
            make_row(policy_number="PN-1", premium_amount="100"),
            make_row(policy_number="PN-2", premium_amount="50.25"),
        ]
        assert _post_csv(client, write_csv(rows).read_bytes()).status_code == 200

    def test_search_returns_user_and_policies(self, client: TestClient) -> None:
        response = client.get("/api/policies/search", params={"username": "lura"})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["firstname"] == "Lura Lucca"
        assert body["user"]["user_type"] == "Active Client"
        assert [policy["policy_number"] for policy in body["policies"]] == ["PN-1", "PN-2"]
        first = body["policies"][0]
        assert first["category_name"] == "Commercial Auto"
        assert first["carrier_name"] == "Integon Gen Ins Corp"
        assert first["account_type"] == "Commercial"

    def test_search_without_username_is_400(self, client: TestClient) -> None:
        assert client.get("/api/policies/search").status_code == 400
        assert client.get("/api/policies/search", params={"username": " "}).status_code == 400

    def test_search_unknown_user_is_404(self, client: TestClient) -> None:
        assert client.get("/api/policies/search", params={"username": "zzz"}).status_code == 404

    def test_aggregate(self, client: TestClient) -> None:
        response = client.get("/api/policies/aggregate")

        assert response.status_code == 200
        users = response.json()["users"]
        assert len(users) == 1
        assert users[0]["policy_count"] == 2
        assert users[0]["total_premium"] == pytest.approx(150.25)
        assert {policy["policy_number"] for policy in users[0]["policies"]} == {"PN-1", "PN-2"}


class TestScheduledPosts:
    def test_schedule_and_list(self, client: TestClient) -> None:
        tomorrow = (datetime.now(timezone.utc) + timedelta(days=2)).date().isoformat()
        later = (datetime.now(timezone.utc) + timedelta(days=3)).date().isoformat()

        first = client.post("/api/schedule-post", json={"message": "later", "day": later, "time": "10:00"})
        second = client.post("/api/schedule-post", json={"message": "sooner", "day": tomorrow, "time": "10:00"})

        assert first.status_code == 201
        assert second.status_code == 201
        assert second.json()["status"] == "pending"

        listing = client.get("/api/scheduled-posts")
        assert listing.status_code == 200
        assert [post["message"] for post in listing.json()["posts"]] == ["sooner", "later"]

    def test_missing_field_is_400(self, client: TestClient) -> None:
        response = client.post("/api/schedule-post", json={"message": "hi", "day": "2099-01-01"})

        assert response.status_code == 400

    def test_past_time_is_400(self, client: TestClient) -> None:
        response = client.post("/api/schedule-post", json={"message": "hi", "day": "2000-01-01", "time": "10:00"})

        assert response.status_code == 400
        assert "future" in response.json()["detail"]
