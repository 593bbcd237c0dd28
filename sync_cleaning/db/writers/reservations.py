import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from sync_cleaning.config import DEBUG
from sync_cleaning.db.writers._upsert import upsert_with_distinct_check
from sync_cleaning.errors import WriteError
from sync_cleaning.models.reservations import Reservation
from sync_cleaning.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

RESERVATION_COLUMNS = ["start_date", "end_date", "guest_name", "source", "status", "notes"]


@dataclass
class UpsertSummary:
    """Outcome of one reservation upsert batch."""

    received: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def written(self) -> int:
        return self.created + self.updated


def _to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def upsert_reservations(
    engine: Engine,
    property_id: int,
    platform_user_id: str,
    records: list[dict[str, Any]],
    known_uids: Iterable[str] = (),
    dry_run: bool = False,
) -> UpsertSummary:
    """
    Upsert normalized reservations for one property, keyed by reservation_uid.

    Existing rows are only rewritten when a reservation column changed, and never
    when the stored row belongs to a different property or account.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property the feed belongs to
        platform_user_id: Owning account of the property
        records: Normalized reservation dicts from the iCal parser
        known_uids: reservation_uid values already stored for this property
        dry_run: If True, skip DB writes and log only

    Returns:
        UpsertSummary: created/updated/unchanged counts

    Raises:
        WriteError: If the database rejects the upsert
    """
    now = utc_now()
    known = set(known_uids)
    rows = []

    for record in records:
        uid = record.get("reservation_uid")
        if not uid:
            logger.warning("reservation_missing_uid", property_id=property_id)
            continue

        rows.append(
            {
                "reservation_uid": uid,
                "property_id": property_id,
                "platform_user_id": str(platform_user_id),
                "start_date": _to_date(record["start_date"]),
                "end_date": _to_date(record["end_date"]),
                "guest_name": record.get("guest_name"),
                "source": record.get("source") or "Other",
                "status": record.get("status") or "confirmed",
                "notes": record.get("notes"),
                "created_at": now,
                "updated_at": now,
            }
        )

    summary = UpsertSummary(received=len(rows))

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(rows)} reservations", property_id=property_id)
        return summary

    if not rows:
        logger.info("No reservations to upsert", property_id=property_id)
        return summary

    if DEBUG:
        logger.debug(
            "Sample reservation to upsert:\n%s", json.dumps(rows[0], indent=2, default=str)
        )

    try:
        with engine.begin() as conn:
            written = upsert_with_distinct_check(
                conn=conn,
                table=Reservation,
                rows=rows,
                conflict_columns=["reservation_uid"],
                distinct_columns=RESERVATION_COLUMNS,
                update_columns=[*RESERVATION_COLUMNS, "updated_at"],
                guard=lambda excluded: (
                    (Reservation.property_id == excluded.property_id)
                    & (Reservation.platform_user_id == excluded.platform_user_id)
                ),
                returning=Reservation.reservation_uid,
            )
    except SQLAlchemyError as e:
        message = str(getattr(e, "orig", None) or e)
        logger.error("reservation_upsert_failed", property_id=property_id, error=message)
        raise WriteError(f"Failed to save reservations: {message}") from e

    summary.received = len({row["reservation_uid"] for row in rows})
    summary.created = sum(1 for uid in written if uid not in known)
    summary.updated = len(written) - summary.created
    summary.unchanged = summary.received - len(written)

    logger.info(
        "reservations_upserted",
        property_id=property_id,
        created=summary.created,
        updated=summary.updated,
        unchanged=summary.unchanged,
    )
    return summary
