from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
@patch("sync_cleaning.routes.properties.list_icals")
def test_get_property_icals(mock_list: MagicMock, client: TestClient) -> None:
    mock_list.return_value = [
        {"id": 1, "url": "https://www.airbnb.com/calendar/ical/1.ics", "platform": "Airbnb", "active": True},
        {"id": 2, "url": "https://feeds.example.com/old.ics", "platform": None, "active": False},
    ]

    response = client.get("/property/12/icals")

    assert response.status_code == 200
    assert len(response.json()["icals"]) == 2
    assert mock_list.call_args.args[1] == 12


@pytest.mark.unit
@pytest.mark.parametrize("path", ["/property/abc/icals", "/property/abc/has-ical"])
def test_property_routes_reject_non_integer_id(client: TestClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid property ID"}


@pytest.mark.unit
@pytest.mark.parametrize("active", [True, False])
def test_property_has_ical(client: TestClient, active: bool) -> None:
    with patch("sync_cleaning.routes.properties.has_active_ical", return_value=active):
        response = client.get("/property/12/has-ical")

    assert response.status_code == 200
    assert response.json() == {"hasIcal": active}


@pytest.mark.unit
@patch("sync_cleaning.routes.properties.list_icals")
def test_get_property_icals_database_error(mock_list: MagicMock, client: TestClient) -> None:
    mock_list.side_effect = RuntimeError("connection refused")

    response = client.get("/property/12/icals")

    assert response.status_code == 500
    assert response.json() == {"error": "Database operation failed"}
