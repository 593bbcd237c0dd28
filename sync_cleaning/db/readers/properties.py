from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from sync_cleaning.models.properties import Property, PropertyICal


def get_property(
    conn: Connection, property_id: int, platform_user_id: Optional[str] = None
) -> Optional[dict[str, Any]]:
    """
    Fetch a property, optionally scoped to its owning account.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.
        platform_user_id (Optional[str]): When given, only a property owned by this
            account is returned.

    Returns:
        Optional[dict]: id, platform_user_id, name, status, timezone or None if not found
    """
    stmt = select(
        Property.id,
        Property.platform_user_id,
        Property.name,
        Property.status,
        Property.timezone,
    ).where(Property.id == property_id)
    if platform_user_id is not None:
        stmt = stmt.where(Property.platform_user_id == str(platform_user_id))

    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_active_properties(conn: Connection) -> list[dict[str, Any]]:
    """
    List every property flagged active, ordered by ID.

    Properties without an owning account are included so the bulk sync can
    report them as skipped.

    Args:
        conn (Connection): An active SQLAlchemy database connection.

    Returns:
        list[dict]: Rows with id, platform_user_id and timezone
    """
    result = conn.execute(
        select(Property.id, Property.platform_user_id, Property.timezone)
        .where(Property.status == "active")
        .order_by(Property.id)
    )
    return [dict(row) for row in result.mappings().all()]


def get_active_icals(conn: Connection, property_id: int) -> list[dict[str, Any]]:
    """
    Active feeds with a URL for one property.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.

    Returns:
        list[dict]: Rows with id, url and platform
    """
    result = conn.execute(
        select(PropertyICal.id, PropertyICal.url, PropertyICal.platform)
        .where(
            PropertyICal.property_id == property_id,
            PropertyICal.active.is_(True),
            PropertyICal.url.is_not(None),
        )
        .order_by(PropertyICal.id)
    )
    return [dict(row) for row in result.mappings().all()]


def list_icals(conn: Connection, property_id: int) -> list[dict[str, Any]]:
    """All feeds (active or not) for one property, for display."""
    result = conn.execute(
        select(PropertyICal.id, PropertyICal.url, PropertyICal.platform, PropertyICal.active)
        .where(PropertyICal.property_id == property_id)
        .order_by(PropertyICal.id)
    )
    return [dict(row) for row in result.mappings().all()]


def has_active_ical(conn: Connection, property_id: int) -> bool:
    """
    Check whether a property has at least one active feed.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.

    Returns:
        bool: True if an active feed exists
    """
    result = conn.execute(
        select(PropertyICal.id)
        .where(PropertyICal.property_id == property_id, PropertyICal.active.is_(True))
        .limit(1)
    )
    return result.fetchone() is not None
