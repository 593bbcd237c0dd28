from __future__ import annotations

from typing import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from sync_cleaning.dependencies import get_db_engine
from sync_cleaning.main import app


@pytest.fixture
def mock_engine() -> MagicMock:
    """Engine stand-in; route tests patch the services and readers that use it."""
    return MagicMock()


@pytest.fixture
def client(mock_engine: MagicMock) -> Iterator[TestClient]:
    """FastAPI test client with the database engine overridden."""
    app.dependency_overrides[get_db_engine] = lambda: mock_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
