"""
Integration tests for the reservation writer against PostgreSQL.
"""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from sync_cleaning.db.writers.reservations import upsert_reservations
from sync_cleaning.models.reservations import Reservation
from sync_cleaning.normalizers.ical import parse_ical


def _count(db_engine: Engine, property_id: int) -> int:
    with db_engine.connect() as conn:
        return conn.execute(
            select(func.count())
            .select_from(Reservation)
            .where(Reservation.property_id == property_id)
        ).scalar_one()


@pytest.mark.integration
def test_reingesting_feed_does_not_duplicate(
    db_engine: Engine, test_property: dict[str, Any], airbnb_feed: str
) -> None:
    records = parse_ical(airbnb_feed, ical_url=test_property["url"]).accepted

    first = upsert_reservations(
        db_engine, test_property["id"], test_property["platform_user_id"], records
    )
    second = upsert_reservations(
        db_engine,
        test_property["id"],
        test_property["platform_user_id"],
        records,
        known_uids={r["reservation_uid"] for r in records},
    )

    assert first.created == 1
    assert second.written == 0
    assert second.unchanged == 1
    assert _count(db_engine, test_property["id"]) == 1


@pytest.mark.integration
def test_changed_dates_update_in_place(
    db_engine: Engine, test_property: dict[str, Any], airbnb_feed: str
) -> None:
    records = parse_ical(airbnb_feed, ical_url=test_property["url"]).accepted
    upsert_reservations(db_engine, test_property["id"], test_property["platform_user_id"], records)

    extended = [{**records[0], "end_date": "2025-06-06"}]
    summary = upsert_reservations(
        db_engine,
        test_property["id"],
        test_property["platform_user_id"],
        extended,
        known_uids={records[0]["reservation_uid"]},
    )

    assert summary.updated == 1
    with db_engine.connect() as conn:
        end_date = conn.execute(
            select(Reservation.end_date).where(
                Reservation.reservation_uid == records[0]["reservation_uid"]
            )
        ).scalar_one()
    assert end_date.isoformat() == "2025-06-06"
    assert _count(db_engine, test_property["id"]) == 1
