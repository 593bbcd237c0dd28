from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from sync_cleaning.models.reservations import Reservation


def get_reservation_uids(conn: Connection, property_id: int, platform_user_id: str) -> set[str]:
    """
    Known reservation UIDs for one property of one account.

    Prefetched once per property so the writer can tell created rows from updates.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.
        platform_user_id (str): Owning account ID.

    Returns:
        set[str]: reservation_uid values already stored
    """
    result = conn.execute(
        select(Reservation.reservation_uid).where(
            Reservation.property_id == property_id,
            Reservation.platform_user_id == str(platform_user_id),
        )
    )
    return {uid for uid in result.scalars().all() if isinstance(uid, str)}


def get_generation_candidates(
    conn: Connection,
    property_id: int,
    platform_user_id: str,
    today: date,
    reservation_ids: Optional[Iterable[int]] = None,
) -> list[dict[str, Any]]:
    """
    Confirmed reservations of a property ending today or later.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.
        platform_user_id (str): Owning account ID.
        today (date): Current calendar day in the property's timezone.
        reservation_ids (Optional[Iterable[int]]): Restrict to these reservations.

    Returns:
        list[dict]: Rows with id, reservation_uid, start_date, end_date, status
    """
    stmt = (
        select(
            Reservation.id,
            Reservation.reservation_uid,
            Reservation.property_id,
            Reservation.platform_user_id,
            Reservation.start_date,
            Reservation.end_date,
            Reservation.status,
        )
        .where(
            Reservation.property_id == property_id,
            Reservation.platform_user_id == str(platform_user_id),
            Reservation.end_date >= today,
            Reservation.status == "confirmed",
        )
        .order_by(Reservation.end_date, Reservation.id)
    )
    if reservation_ids is not None:
        stmt = stmt.where(Reservation.id.in_(list(reservation_ids)))

    return [dict(row) for row in conn.execute(stmt).mappings().all()]


def has_back_to_back(
    conn: Connection,
    property_id: int,
    platform_user_id: str,
    start_date: date,
    exclude_reservation_id: int,
) -> bool:
    """
    Check whether another reservation of the property starts on the given day.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (int): Property ID.
        platform_user_id (str): Owning account ID.
        start_date (date): Checkout day of the reservation being cleaned after.
        exclude_reservation_id (int): The departing reservation itself.

    Returns:
        bool: True if a same-day check-in exists
    """
    result = conn.execute(
        select(Reservation.id)
        .where(
            Reservation.property_id == property_id,
            Reservation.platform_user_id == str(platform_user_id),
            Reservation.start_date == start_date,
            Reservation.id != exclude_reservation_id,
        )
        .limit(1)
    )
    return result.fetchone() is not None
