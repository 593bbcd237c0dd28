"""Property-level and bulk iCal sync orchestration."""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from sync_cleaning.config import SYNC_MAX_WORKERS
from sync_cleaning.db.readers.properties import (
    get_active_icals,
    get_property,
    list_active_properties,
)
from sync_cleaning.db.readers.reservations import get_reservation_uids
from sync_cleaning.db.writers.reservations import upsert_reservations
from sync_cleaning.errors import FetchError, ParseError, PropertyNotFoundError, WriteError
from sync_cleaning.metrics import bulk_sync_duration, property_syncs, reservations_synced
from sync_cleaning.pollers.feeds import poll_feed
from sync_cleaning.services.task_trigger import trigger_task_generation
from sync_cleaning.services.tasks import GenerationResult

logger = structlog.get_logger(__name__)

STATUS_SUCCESS = "success"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"
STATUS_ERROR = "error"


@dataclass
class FeedResult:
    """
    Result record for one (property, feed) pair.

    status is "success", "skipped" (no owner or no active feeds), "error"
    (feed could not be fetched or parsed) or "failed" (write or task
    generation failure for the property; ical_url is None for the latter).
    """

    property_id: int
    ical_url: Optional[str]
    status: str
    error: Optional[str] = None
    synced_reservations: int = 0
    rejected_events: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "propertyId": self.property_id,
            "icalUrl": self.ical_url,
            "status": self.status,
        }
        if self.error:
            data["error"] = self.error
        if self.status == STATUS_SUCCESS:
            data["syncedReservations"] = self.synced_reservations
            data["rejectedEvents"] = self.rejected_events
        return data


@dataclass
class PropertySyncResult:
    """Feed results and task generation outcome for one property."""

    property_id: int
    feeds: list[FeedResult] = field(default_factory=list)
    tasks: Optional[GenerationResult] = None
    task_error: Optional[str] = None
    write_error: Optional[str] = None

    @property
    def synced_reservations(self) -> int:
        return sum(feed.synced_reservations for feed in self.feeds)

    @property
    def feeds_succeeded(self) -> bool:
        return any(feed.status == STATUS_SUCCESS for feed in self.feeds)


@dataclass
class BulkSyncResult:
    """All result records of a bulk sync run."""

    total_properties: int = 0
    results: list[FeedResult] = field(default_factory=list)

    def stats(self) -> dict[str, int]:
        return {
            "total": self.total_properties,
            "succeeded": sum(1 for r in self.results if r.status == STATUS_SUCCESS),
            "failed": sum(1 for r in self.results if r.status == STATUS_FAILED),
            "errors": sum(1 for r in self.results if r.status == STATUS_ERROR),
            "skipped": sum(1 for r in self.results if r.status == STATUS_SKIPPED),
        }


def sync_property(
    engine: Engine,
    property_id: int,
    platform_user_id: str,
    ical_url: Optional[str] = None,
    dry_run: bool = False,
) -> PropertySyncResult:
    """
    Sync every active feed of one property, then generate its cleaning tasks.

    Feeds are processed one after another. A feed that cannot be fetched or
    parsed is recorded as "error" and the next feed still runs. A rejected write
    aborts the remaining feeds and task generation for this property. Task
    generation failures are recorded on the result, not raised, because the
    reservations are already saved at that point.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property to sync
        platform_user_id: Owning account; the property must belong to it
        ical_url: Sync only this feed URL instead of the stored active feeds
        dry_run: If True, skip DB writes

    Returns:
        PropertySyncResult

    Raises:
        PropertyNotFoundError: If the property does not exist for this account
    """
    platform_user_id = str(platform_user_id)
    log = logger.bind(property_id=property_id)
    log.info("property_sync_started")

    with engine.connect() as conn:
        prop = get_property(conn, property_id, platform_user_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)

        if ical_url:
            feeds = [{"url": ical_url, "platform": None}]
        else:
            feeds = get_active_icals(conn, property_id)

        known_uids = get_reservation_uids(conn, property_id, platform_user_id)

    result = PropertySyncResult(property_id=property_id)

    if not feeds:
        log.info("property_has_no_active_feeds")
        result.feeds.append(
            FeedResult(property_id, None, STATUS_SKIPPED, error="No active iCals")
        )
        property_syncs.labels(status=STATUS_SKIPPED).inc()
        return result

    for feed in feeds:
        url = feed["url"]
        try:
            parsed = poll_feed(
                url, property_id, platform=feed.get("platform"), timezone=prop.get("timezone")
            )
        except (FetchError, ParseError) as e:
            log.warning("feed_sync_failed", url=url, error=str(e))
            result.feeds.append(FeedResult(property_id, url, STATUS_ERROR, error=str(e)))
            continue

        try:
            summary = upsert_reservations(
                engine,
                property_id,
                platform_user_id,
                parsed.accepted,
                known_uids=known_uids,
                dry_run=dry_run,
            )
        except WriteError as e:
            log.error("feed_write_failed", url=url, error=str(e))
            result.feeds.append(FeedResult(property_id, url, STATUS_FAILED, error=str(e)))
            result.write_error = str(e)
            property_syncs.labels(status=STATUS_FAILED).inc()
            return result

        known_uids.update(record["reservation_uid"] for record in parsed.accepted)
        if not dry_run:
            reservations_synced.labels(property_id=str(property_id)).inc(summary.written)

        result.feeds.append(
            FeedResult(
                property_id,
                url,
                STATUS_SUCCESS,
                synced_reservations=len(parsed.accepted),
                rejected_events=len(parsed.rejected),
            )
        )

    try:
        result.tasks = trigger_task_generation(engine, property_id, dry_run=dry_run)
    except Exception as e:
        log.exception("task_generation_failed", error=str(e))
        result.task_error = str(e)

    outcome = STATUS_SUCCESS if result.task_error is None and result.feeds_succeeded else "partial"
    property_syncs.labels(status=outcome).inc()
    log.info(
        "property_sync_completed",
        synced_reservations=result.synced_reservations,
        feeds=len(result.feeds),
        task_error=result.task_error,
    )
    return result


def _sync_one(engine: Engine, prop: dict[str, Any], dry_run: bool) -> list[FeedResult]:
    property_id = prop["id"]
    owner = prop.get("platform_user_id")

    if not owner:
        logger.warning("property_missing_platform_user_id", property_id=property_id)
        property_syncs.labels(status=STATUS_SKIPPED).inc()
        return [FeedResult(property_id, None, STATUS_SKIPPED, error="No platform_user_id")]

    try:
        outcome = sync_property(engine, property_id, str(owner), dry_run=dry_run)
    except Exception as e:
        logger.exception("property_sync_failed", property_id=property_id, error=str(e))
        property_syncs.labels(status=STATUS_FAILED).inc()
        return [FeedResult(property_id, None, STATUS_FAILED, error=str(e))]

    results = list(outcome.feeds)
    if outcome.task_error:
        results.append(
            FeedResult(
                property_id,
                None,
                STATUS_FAILED,
                error=f"Task generation failed: {outcome.task_error}",
            )
        )
    return results


def sync_all_properties(
    engine: Engine, dry_run: bool = False, max_workers: int = SYNC_MAX_WORKERS
) -> BulkSyncResult:
    """
    Sync all active properties and generate their cleaning tasks.

    Properties run sequentially unless max_workers > 1, in which case at most
    max_workers properties are in flight. One property's failure is recorded
    in its result records and never stops the others.

    Args:
        engine: SQLAlchemy Engine
        dry_run: If True, do not write to DB
        max_workers: Properties processed concurrently

    Returns:
        BulkSyncResult: Per-(property, feed) records in property order
    """
    logger.info("sync_all_properties_started")

    with bulk_sync_duration.time():
        with engine.connect() as conn:
            properties = list_active_properties(conn)

        logger.info("active_properties_found", count=len(properties))
        bulk = BulkSyncResult(total_properties=len(properties))

        if max_workers > 1 and len(properties) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                futures = [
                    # Each property keeps the request_id bound by the caller
                    pool.submit(contextvars.copy_context().run, _sync_one, engine, prop, dry_run)
                    for prop in properties
                ]
                for future in futures:
                    bulk.results.extend(future.result())
        else:
            for index, prop in enumerate(properties, start=1):
                bulk.results.extend(_sync_one(engine, prop, dry_run))
                logger.info("property_processed", processed=index, total=len(properties))

    logger.info("sync_all_properties_completed", **bulk.stats())
    return bulk
