"""
Generic upsert helper with IS DISTINCT FROM optimization.

Reservation and cleaning task writers share this helper. A conflicting row is
only rewritten when one of the distinct columns changed and the optional guard
holds, so repeated syncs of an unchanged feed produce no writes.
"""

from collections import OrderedDict
from typing import Any, Callable, Optional, Sequence

import structlog
from sqlalchemy import and_, or_
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.engine import Connection

logger = structlog.get_logger(__name__)


def dedupe_rows(rows: list[dict[str, Any]], key_columns: Sequence[str]) -> list[dict[str, Any]]:
    """
    Collapse rows sharing a conflict key, keeping the last occurrence.

    PostgreSQL rejects an INSERT .. ON CONFLICT DO UPDATE that touches the same
    row twice, so duplicates are reconciled here and logged instead.

    Args:
        rows: Row dicts to write
        key_columns: Columns forming the conflict key

    Returns:
        Rows with unique keys, in first-seen key order
    """
    unique: "OrderedDict[tuple[Any, ...], dict[str, Any]]" = OrderedDict()
    for row in rows:
        key = tuple(row.get(col) for col in key_columns)
        if key in unique:
            logger.warning("duplicate_key_in_batch", key=[str(k) for k in key])
        unique[key] = row
    return list(unique.values())


def build_upsert(
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: Sequence[str],
    distinct_columns: Sequence[str],
    update_columns: Optional[Sequence[str]] = None,
    guard: Optional[Callable[[Any], Any]] = None,
) -> Insert:
    """
    Build an INSERT .. ON CONFLICT DO UPDATE statement.

    Args:
        table: SQLAlchemy ORM table class (e.g., Reservation, CleaningTask)
        rows: List of row dicts to upsert
        conflict_columns: Columns of the unique constraint used for ON CONFLICT
        distinct_columns: Columns compared with IS DISTINCT FROM; the update only
            runs when at least one differs
        update_columns: Columns to overwrite on conflict
            (default: distinct_columns + ["updated_at"])
        guard: Optional callable receiving the EXCLUDED pseudo-table and returning
            an extra condition the existing row must satisfy

    Returns:
        Insert: Statement ready for conn.execute (add .returning() as needed)

    Example:
        >>> stmt = build_upsert(
        ...     Reservation,
        ...     rows,
        ...     conflict_columns=["reservation_uid"],
        ...     distinct_columns=["start_date", "end_date"],
        ... )
    """
    if update_columns is None:
        update_columns = [*distinct_columns, "updated_at"]

    stmt = insert(table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}

    distinct_check = or_(
        *[
            getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
            for col in distinct_columns
        ]
    )
    where = distinct_check if guard is None else and_(guard(stmt.excluded), distinct_check)

    return stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=set_dict,
        where=where,
    )


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: Sequence[str],
    distinct_columns: Sequence[str],
    update_columns: Optional[Sequence[str]] = None,
    guard: Optional[Callable[[Any], Any]] = None,
    returning: Optional[Any] = None,
) -> list[Any]:
    """
    Perform an upsert and return the values of `returning` for written rows.

    Rows skipped by the distinct check or the guard are not returned.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class
        rows: List of row dicts to upsert
        conflict_columns: Columns for ON CONFLICT
        distinct_columns: Columns to check for changes
        update_columns: Columns to update on conflict
        guard: Extra condition on the existing row (see build_upsert)
        returning: Column to return for each inserted or updated row

    Returns:
        list: Returned column values, empty when returning is None
    """
    if not rows:
        return []

    rows = dedupe_rows(rows, conflict_columns)
    stmt = build_upsert(table, rows, conflict_columns, distinct_columns, update_columns, guard)

    if returning is None:
        conn.execute(stmt)
        return []

    result = conn.execute(stmt.returning(returning))
    return list(result.scalars().all())
