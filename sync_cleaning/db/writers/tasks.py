import json
from typing import Any

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from sync_cleaning.config import DEBUG
from sync_cleaning.db.writers._upsert import upsert_with_distinct_check
from sync_cleaning.errors import WriteError
from sync_cleaning.models.tasks import CleaningTask
from sync_cleaning.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

IDEMPOTENCE_KEY = ["reservation_id", "task_type_id", "scheduled_date"]
GENERATED_COLUMNS = ["priority_tag", "task_category", "notes"]
COMPLETED = "Completed"


def upsert_cleaning_tasks(engine: Engine, tasks: list[dict[str, Any]], dry_run: bool = False) -> int:
    """
    Upsert generated cleaning tasks keyed by (reservation, task type, scheduled date).

    On conflict the generated columns are replaced so a later back-to-back booking
    can promote a task to "B2B". Assignment status is left alone and a task whose
    stored status is "Completed" is never rewritten.

    Args:
        engine: SQLAlchemy Engine
        tasks: Task row dicts built by the generator
        dry_run: If True, skip DB writes and log only

    Returns:
        int: Number of rows inserted or updated

    Raises:
        WriteError: If the database rejects the upsert
    """
    now = utc_now()
    rows = [{**task, "created_at": now, "updated_at": now} for task in tasks]

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(rows)} cleaning tasks")
        return 0

    if not rows:
        logger.info("No cleaning tasks to upsert")
        return 0

    if DEBUG:
        logger.debug("Sample task to upsert:\n%s", json.dumps(rows[0], indent=2, default=str))

    try:
        with engine.begin() as conn:
            written = upsert_with_distinct_check(
                conn=conn,
                table=CleaningTask,
                rows=rows,
                conflict_columns=IDEMPOTENCE_KEY,
                distinct_columns=GENERATED_COLUMNS,
                update_columns=[*GENERATED_COLUMNS, "updated_at"],
                guard=lambda excluded: CleaningTask.status != COMPLETED,
                returning=CleaningTask.id,
            )
    except SQLAlchemyError as e:
        message = str(getattr(e, "orig", None) or e)
        logger.error("cleaning_task_upsert_failed", error=message, count=len(rows))
        raise WriteError(message) from e

    logger.info(f"Upserted {len(written)} cleaning tasks into DB")
    return len(written)
