"""
Shared fixtures for database integration tests.

These tests need a reachable PostgreSQL at DATABASE_URL and are skipped otherwise.
"""

from __future__ import annotations

from typing import Any, Generator

import pytest
from sqlalchemy import delete, insert, text
from sqlalchemy.engine import Engine

from sync_cleaning.config import SCHEMA
from sync_cleaning.db.engine import check_engine_health, engine
from sync_cleaning.models.base import Base
from sync_cleaning.models.properties import Property, PropertyICal
from sync_cleaning.models.reservations import Reservation
from sync_cleaning.models.tasks import CleaningTask, TaskType

TEST_OWNER = "5b7e8d3c-0000-4000-8000-00000000beef"
TEST_PROPERTY_ID = 990001
TEST_FEED_URL = "https://www.airbnb.com/calendar/ical/990001.ics?s=test"


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    if not check_engine_health(engine):
        pytest.skip("PostgreSQL not reachable at DATABASE_URL")

    with engine.begin() as conn:
        conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"'))
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def test_property(db_engine: Engine) -> Generator[dict[str, Any], None, None]:
    """
    Create an active property with one feed and a "Clean" task type.

    Cleans up everything owned by the test account afterwards.
    """
    with db_engine.begin() as conn:
        conn.execute(
            insert(Property).values(
                id=TEST_PROPERTY_ID,
                platform_user_id=TEST_OWNER,
                name="Integration Cottage",
                status="active",
                timezone="Australia/Brisbane",
            )
        )
        conn.execute(
            insert(PropertyICal).values(
                property_id=TEST_PROPERTY_ID, url=TEST_FEED_URL, platform="Airbnb", active=True
            )
        )
        task_type_id = conn.execute(
            insert(TaskType)
            .values(platform_user_id=TEST_OWNER, name="Clean")
            .returning(TaskType.id)
        ).scalar_one()

    yield {
        "id": TEST_PROPERTY_ID,
        "platform_user_id": TEST_OWNER,
        "url": TEST_FEED_URL,
        "task_type_id": task_type_id,
    }

    with db_engine.begin() as conn:
        conn.execute(delete(CleaningTask).where(CleaningTask.platform_user_id == TEST_OWNER))
        conn.execute(delete(Reservation).where(Reservation.platform_user_id == TEST_OWNER))
        conn.execute(delete(TaskType).where(TaskType.platform_user_id == TEST_OWNER))
        conn.execute(delete(PropertyICal).where(PropertyICal.property_id == TEST_PROPERTY_ID))
        conn.execute(delete(Property).where(Property.id == TEST_PROPERTY_ID))
