from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from sync_cleaning.services.sync import (
    FeedResult,
    PropertySyncResult,
    sync_all_properties,
)

OWNER = "5b7e8d3c-0000-4000-8000-000000000001"
MODULE = "sync_cleaning.services.sync"


def _outcome(property_id: int, *feeds: FeedResult, task_error=None) -> PropertySyncResult:
    return PropertySyncResult(property_id=property_id, feeds=list(feeds), task_error=task_error)


@pytest.mark.unit
@patch(f"{MODULE}.sync_property")
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_records_error_and_success(
    mock_list: MagicMock, mock_sync: MagicMock
) -> None:
    """
    One property whose feed returns 403 and one healthy property produce one
    error record and one success record.
    """
    mock_list.return_value = [
        {"id": 1, "platform_user_id": OWNER},
        {"id": 2, "platform_user_id": OWNER},
    ]
    mock_sync.side_effect = [
        _outcome(1, FeedResult(1, "https://a/1.ics", "error", error="Failed to fetch iCal: 403 Forbidden")),
        _outcome(2, FeedResult(2, "https://a/2.ics", "success", synced_reservations=3)),
    ]

    bulk = sync_all_properties(MagicMock(), max_workers=1)

    assert [(r.property_id, r.status) for r in bulk.results] == [(1, "error"), (2, "success")]
    assert bulk.stats() == {"total": 2, "succeeded": 1, "failed": 0, "errors": 1, "skipped": 0}


@pytest.mark.unit
@patch(f"{MODULE}.sync_property")
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_skips_property_without_owner(mock_list: MagicMock, mock_sync: MagicMock) -> None:
    mock_list.return_value = [{"id": 1, "platform_user_id": None}]

    bulk = sync_all_properties(MagicMock(), max_workers=1)

    mock_sync.assert_not_called()
    assert bulk.results[0].status == "skipped"
    assert bulk.results[0].ical_url is None


@pytest.mark.unit
@patch(f"{MODULE}.sync_property")
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_continues_after_unexpected_error(
    mock_list: MagicMock, mock_sync: MagicMock
) -> None:
    mock_list.return_value = [
        {"id": 1, "platform_user_id": OWNER},
        {"id": 2, "platform_user_id": OWNER},
    ]
    mock_sync.side_effect = [
        RuntimeError("connection reset"),
        _outcome(2, FeedResult(2, "https://a/2.ics", "success")),
    ]

    bulk = sync_all_properties(MagicMock(), max_workers=1)

    assert [(r.property_id, r.status) for r in bulk.results] == [(1, "failed"), (2, "success")]
    assert bulk.results[0].error == "connection reset"


@pytest.mark.unit
@patch(f"{MODULE}.sync_property")
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_adds_record_for_task_failure(
    mock_list: MagicMock, mock_sync: MagicMock
) -> None:
    mock_list.return_value = [{"id": 1, "platform_user_id": OWNER}]
    mock_sync.return_value = _outcome(
        1, FeedResult(1, "https://a/1.ics", "success"), task_error="Missing task_type_id for Clean"
    )

    bulk = sync_all_properties(MagicMock(), max_workers=1)

    assert [r.status for r in bulk.results] == ["success", "failed"]
    assert bulk.results[1].error == "Task generation failed: Missing task_type_id for Clean"


@pytest.mark.unit
@patch(f"{MODULE}.sync_property")
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_with_workers_keeps_property_order(
    mock_list: MagicMock, mock_sync: MagicMock
) -> None:
    mock_list.return_value = [{"id": i, "platform_user_id": OWNER} for i in range(1, 5)]
    mock_sync.side_effect = lambda engine, pid, owner, dry_run=False: _outcome(
        pid, FeedResult(pid, f"https://a/{pid}.ics", "success")
    )

    bulk = sync_all_properties(MagicMock(), max_workers=3)

    assert [r.property_id for r in bulk.results] == [1, 2, 3, 4]
    assert bulk.stats()["succeeded"] == 4


@pytest.mark.unit
@patch(f"{MODULE}.list_active_properties")
def test_sync_all_no_properties(mock_list: MagicMock) -> None:
    mock_list.return_value = []

    bulk = sync_all_properties(MagicMock())

    assert bulk.results == []
    assert bulk.stats()["total"] == 0


@pytest.mark.unit
def test_feed_result_to_dict() -> None:
    ok = FeedResult(1, "https://a/1.ics", "success", synced_reservations=3, rejected_events=1)
    bad = FeedResult(1, "https://a/1.ics", "error", error="Failed to fetch iCal: 404 Not Found")

    assert ok.to_dict() == {
        "propertyId": 1,
        "icalUrl": "https://a/1.ics",
        "status": "success",
        "syncedReservations": 3,
        "rejectedEvents": 1,
    }
    assert bad.to_dict() == {
        "propertyId": 1,
        "icalUrl": "https://a/1.ics",
        "status": "error",
        "error": "Failed to fetch iCal: 404 Not Found",
    }
