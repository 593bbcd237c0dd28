from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from sync_cleaning.models.tasks import CleaningTask, TaskType


def get_task_type_id(conn: Connection, platform_user_id: str, name: str) -> Optional[int]:
    """
    Look up a task type by name for one account.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        platform_user_id (str): Owning account ID.
        name (str): Task type name, e.g. "Clean".

    Returns:
        Optional[int]: Task type ID or None if the account has not registered it
    """
    result = conn.execute(
        select(TaskType.id)
        .where(TaskType.platform_user_id == str(platform_user_id), TaskType.name == name)
        .limit(1)
    )
    row = result.fetchone()
    return row[0] if row else None


def get_existing_task(
    conn: Connection,
    platform_user_id: str,
    reservation_id: int,
    task_type_id: int,
    scheduled_date: date,
) -> Optional[dict[str, Any]]:
    """
    Fetch the task stored under an idempotence key.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        platform_user_id (str): Owning account ID.
        reservation_id (int): Reservation ID.
        task_type_id (int): Task type ID.
        scheduled_date (date): Scheduled day.

    Returns:
        Optional[dict]: id and status, or None
    """
    result = conn.execute(
        select(CleaningTask.id, CleaningTask.status).where(
            CleaningTask.platform_user_id == str(platform_user_id),
            CleaningTask.reservation_id == reservation_id,
            CleaningTask.task_type_id == task_type_id,
            CleaningTask.scheduled_date == scheduled_date,
        )
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None
