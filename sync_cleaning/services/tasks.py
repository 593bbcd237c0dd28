"""Cleaning task generation from confirmed reservations."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Engine

from sync_cleaning.db.readers.properties import get_property
from sync_cleaning.db.readers.reservations import get_generation_candidates, has_back_to_back
from sync_cleaning.db.readers.tasks import get_existing_task, get_task_type_id
from sync_cleaning.db.writers.tasks import upsert_cleaning_tasks
from sync_cleaning.errors import ConfigurationError, PropertyNotFoundError
from sync_cleaning.metrics import tasks_generated
from sync_cleaning.utils.datetime import today_in

logger = structlog.get_logger(__name__)

CLEAN_TASK_TYPE = "Clean"
PRIORITY_B2B = "B2B"
PRIORITY_DEPARTURE = "Departure Clean"
STATUS_UNASSIGNED = "Unassigned"
STATUS_COMPLETED = "Completed"

NO_RESERVATIONS_MESSAGE = "No relevant reservations found"
NO_TASKS_MESSAGE = "No tasks to generate"


@dataclass
class GenerationResult:
    """Outcome of one task generation run for a property."""

    property_id: int
    message: str
    created: int = 0
    updated: int = 0
    skipped_completed: int = 0

    @property
    def total(self) -> int:
        return self.created + self.updated

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "created": self.created,
            "updated": self.updated,
            "skippedCompleted": self.skipped_completed,
            "total": self.total,
        }


def generate_cleaning_tasks(
    engine: Engine,
    property_id: int,
    reservation_ids: Optional[Iterable[int]] = None,
    today: Optional[date] = None,
    dry_run: bool = False,
) -> GenerationResult:
    """
    Create or refresh the "Clean" task for every upcoming checkout of a property.

    A task is tagged "B2B" when another reservation of the property starts on the
    checkout day, otherwise "Departure Clean". Tasks already "Completed" are left
    untouched. Both empty outcomes are successes, not errors.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property to generate tasks for
        reservation_ids: Restrict generation to these reservations
        today: Override "today" (defaults to the property's timezone)
        dry_run: If True, build the batch but skip DB writes

    Returns:
        GenerationResult: message plus created/updated/skipped counts. updated
            counts existing tasks the upsert actually rewrote; a dry run counts
            every existing open task.

    Raises:
        PropertyNotFoundError: If the property does not exist
        ConfigurationError: If the property has no owner or the owner has no "Clean" task type
        WriteError: If the task upsert is rejected
    """
    logger.info("task_generation_started", property_id=property_id)

    tasks: list[dict[str, Any]] = []
    created = updated = skipped_completed = 0

    with engine.connect() as conn:
        prop = get_property(conn, property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)

        owner = prop["platform_user_id"]
        if not owner:
            raise ConfigurationError(f"Property {property_id} has no platform_user_id")
        owner = str(owner)

        if today is None:
            today = today_in(prop.get("timezone"))

        reservations = get_generation_candidates(
            conn, property_id, owner, today, reservation_ids=reservation_ids
        )
        logger.info("reservations_fetched", property_id=property_id, count=len(reservations))

        if not reservations:
            return GenerationResult(property_id=property_id, message=NO_RESERVATIONS_MESSAGE)

        task_type_id = get_task_type_id(conn, owner, CLEAN_TASK_TYPE)
        if task_type_id is None:
            logger.error("clean_task_type_missing", property_id=property_id, platform_user_id=owner)
            raise ConfigurationError("Missing task_type_id for Clean")

        for reservation in reservations:
            scheduled_date = reservation["end_date"]

            if has_back_to_back(conn, property_id, owner, scheduled_date, reservation["id"]):
                priority_tag = PRIORITY_B2B
            else:
                priority_tag = PRIORITY_DEPARTURE

            existing = get_existing_task(
                conn, owner, reservation["id"], task_type_id, scheduled_date
            )
            if existing and existing["status"] == STATUS_COMPLETED:
                logger.info(
                    "task_already_completed",
                    property_id=property_id,
                    reservation_id=reservation["id"],
                )
                skipped_completed += 1
                continue

            if existing:
                updated += 1
            else:
                created += 1

            tasks.append(
                {
                    "property_id": property_id,
                    "reservation_id": reservation["id"],
                    "platform_user_id": owner,
                    "task_category": CLEAN_TASK_TYPE,
                    "task_type_id": task_type_id,
                    "priority_tag": priority_tag,
                    "scheduled_date": scheduled_date,
                    "status": STATUS_UNASSIGNED,
                    "notes": (
                        f"Auto-generated {priority_tag.lower()} for reservation "
                        f"{reservation['reservation_uid']}"
                    ),
                }
            )

    if not tasks:
        return GenerationResult(
            property_id=property_id,
            message=NO_TASKS_MESSAGE,
            skipped_completed=skipped_completed,
        )

    written = upsert_cleaning_tasks(engine, tasks, dry_run=dry_run)

    if not dry_run:
        # Existing tasks whose generated columns did not change are not rewritten
        updated = max(written - created, 0)
        for task in tasks:
            tasks_generated.labels(priority_tag=task["priority_tag"]).inc()

    logger.info(
        "tasks_generated",
        property_id=property_id,
        created=created,
        updated=updated,
        skipped_completed=skipped_completed,
        dry_run=dry_run,
    )

    return GenerationResult(
        property_id=property_id,
        message=f"Generated/updated {len(tasks)} cleaning tasks.",
        created=created,
        updated=updated,
        skipped_completed=skipped_completed,
    )
