"""
Unit tests for the task generation and iCal sync endpoints.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from sync_cleaning.errors import ConfigurationError, PropertyNotFoundError, WriteError
from sync_cleaning.services.sync import BulkSyncResult, FeedResult, PropertySyncResult
from sync_cleaning.services.tasks import GenerationResult

OWNER = "5b7e8d3c-0000-4000-8000-000000000001"
URL = "https://feeds.example.com/1.ics"


# ---------- /generate-cleaning-tasks ----------


@pytest.mark.unit
@pytest.mark.parametrize("body", [None, {}, {"property_id": None}])
def test_generate_tasks_requires_property_id(client: TestClient, body) -> None:
    response = client.post("/generate-cleaning-tasks", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing property_id"}


@pytest.mark.unit
@patch("sync_cleaning.routes.tasks.generate_cleaning_tasks")
def test_generate_tasks_success(mock_generate: MagicMock, client: TestClient) -> None:
    mock_generate.return_value = GenerationResult(
        7, "Generated/updated 2 cleaning tasks.", created=1, updated=1
    )

    response = client.post("/generate-cleaning-tasks", json={"property_id": 7})

    assert response.status_code == 200
    assert response.json() == {
        "message": "Generated/updated 2 cleaning tasks.",
        "created": 1,
        "updated": 1,
        "skippedCompleted": 0,
        "total": 2,
    }
    assert mock_generate.call_args.args[1] == 7


@pytest.mark.unit
@patch("sync_cleaning.routes.tasks.generate_cleaning_tasks")
def test_generate_tasks_no_reservations_is_200(mock_generate: MagicMock, client: TestClient) -> None:
    mock_generate.return_value = GenerationResult(7, "No relevant reservations found")

    response = client.post("/generate-cleaning-tasks", json={"property_id": 7})

    assert response.status_code == 200
    assert response.json()["message"] == "No relevant reservations found"


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, status_code, body",
    [
        (PropertyNotFoundError(7), 404, {"error": "Property 7 not found"}),
        (
            ConfigurationError("Missing task_type_id for Clean"),
            500,
            {"error": "Missing task_type_id for Clean"},
        ),
        (
            WriteError("deadlock detected"),
            500,
            {"error": "Failed to upsert tasks", "detail": "deadlock detected"},
        ),
        (RuntimeError("boom"), 500, {"error": "Unexpected error", "detail": "boom"}),
    ],
)
def test_generate_tasks_error_mapping(
    client: TestClient, error: Exception, status_code: int, body: dict
) -> None:
    with patch("sync_cleaning.routes.tasks.generate_cleaning_tasks", side_effect=error):
        response = client.post("/generate-cleaning-tasks", json={"property_id": 7})

    assert response.status_code == status_code
    assert response.json() == body


@pytest.mark.unit
@patch("sync_cleaning.routes.tasks.generate_cleaning_tasks")
def test_generate_tasks_dry_run_query(mock_generate: MagicMock, client: TestClient) -> None:
    mock_generate.return_value = GenerationResult(7, "No tasks to generate")

    client.post("/generate-cleaning-tasks?dry_run=true", json={"property_id": 7})

    assert mock_generate.call_args.kwargs["dry_run"] is True


# ---------- /sync-ical ----------


@pytest.mark.unit
@pytest.mark.parametrize(
    "body", [None, {}, {"property_id": 1}, {"platform_user_id": OWNER}]
)
def test_sync_ical_requires_property_and_owner(client: TestClient, body) -> None:
    response = client.post("/sync-ical", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing property_id or platform_user_id"}


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_success(mock_sync: MagicMock, client: TestClient) -> None:
    mock_sync.return_value = PropertySyncResult(
        property_id=1,
        feeds=[FeedResult(1, URL, "success", synced_reservations=3)],
        tasks=GenerationResult(1, "Generated/updated 2 cleaning tasks.", created=2),
    )

    response = client.post("/sync-ical", json={"property_id": 1, "platform_user_id": OWNER})

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "iCal synced successfully"
    assert data["syncedReservations"] == 3
    assert data["feeds"][0]["status"] == "success"
    assert data["taskGeneration"]["created"] == 2

    args = mock_sync.call_args
    assert args.args[1:] == (1, OWNER)
    assert args.kwargs["ical_url"] is None


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_passes_single_url(mock_sync: MagicMock, client: TestClient) -> None:
    mock_sync.return_value = PropertySyncResult(
        property_id=1, feeds=[FeedResult(1, URL, "success")]
    )

    client.post(
        "/sync-ical", json={"property_id": 1, "platform_user_id": OWNER, "ical_url": URL}
    )

    assert mock_sync.call_args.kwargs["ical_url"] == URL


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_unknown_property(mock_sync: MagicMock, client: TestClient) -> None:
    mock_sync.side_effect = PropertyNotFoundError(1)

    response = client.post("/sync-ical", json={"property_id": 1, "platform_user_id": OWNER})

    assert response.status_code == 404


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_all_feeds_failed_is_502(mock_sync: MagicMock, client: TestClient) -> None:
    mock_sync.return_value = PropertySyncResult(
        property_id=1,
        feeds=[FeedResult(1, URL, "error", error="Failed to fetch iCal: 403 Forbidden")],
    )

    response = client.post("/sync-ical", json={"property_id": 1, "platform_user_id": OWNER})

    assert response.status_code == 502
    assert response.json()["error"] == "iCal sync failed"


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_write_failure_is_500(mock_sync: MagicMock, client: TestClient) -> None:
    mock_sync.return_value = PropertySyncResult(
        property_id=1,
        feeds=[FeedResult(1, URL, "failed", error="Failed to save reservations: boom")],
        write_error="Failed to save reservations: boom",
    )

    response = client.post("/sync-ical", json={"property_id": 1, "platform_user_id": OWNER})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to save reservations"


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_property")
def test_sync_ical_task_failure_reports_saved_reservations(
    mock_sync: MagicMock, client: TestClient
) -> None:
    mock_sync.return_value = PropertySyncResult(
        property_id=1,
        feeds=[FeedResult(1, URL, "success", synced_reservations=2)],
        task_error="Missing task_type_id for Clean",
    )

    response = client.post("/sync-ical", json={"property_id": 1, "platform_user_id": OWNER})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Reservations saved, but task generation failed"
    assert data["details"] == "Missing task_type_id for Clean"
    assert data["syncedReservations"] == 2


# ---------- /sync-ical-all ----------


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_all_properties")
def test_sync_ical_all_reports_per_feed_results(mock_bulk: MagicMock, client: TestClient) -> None:
    mock_bulk.return_value = BulkSyncResult(
        total_properties=2,
        results=[
            FeedResult(1, URL, "error", error="Failed to fetch iCal: 403 Forbidden"),
            FeedResult(2, "https://feeds.example.com/2.ics", "success", synced_reservations=4),
        ],
    )

    response = client.get("/sync-ical-all")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Sync complete"
    assert data["stats"] == {"total": 2, "succeeded": 1, "failed": 0, "errors": 1, "skipped": 0}
    assert [r["status"] for r in data["results"]] == ["error", "success"]
    assert data["results"][0]["error"] == "Failed to fetch iCal: 403 Forbidden"


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_all_properties")
def test_sync_ical_all_unexpected_error(mock_bulk: MagicMock, client: TestClient) -> None:
    mock_bulk.side_effect = RuntimeError("database unavailable")

    response = client.get("/sync-ical-all")

    assert response.status_code == 500
    assert response.json() == {"error": "Unexpected error", "detail": "database unavailable"}


# ---------- service token ----------


@pytest.mark.unit
@patch("sync_cleaning.routes.sync.sync_all_properties")
def test_pipeline_routes_require_token_when_configured(
    mock_bulk: MagicMock, client: TestClient
) -> None:
    mock_bulk.return_value = BulkSyncResult()

    with patch("sync_cleaning.dependencies.SERVICE_TOKEN", "s3cret"):
        missing = client.get("/sync-ical-all")
        wrong = client.get("/sync-ical-all", headers={"Authorization": "Bearer nope"})
        ok = client.get("/sync-ical-all", headers={"Authorization": "Bearer s3cret"})
        health = client.get("/health")

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert ok.status_code == 200
    assert health.status_code == 200
