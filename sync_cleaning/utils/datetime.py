"""Datetime helpers: UTC timestamps and calendar days in an operating timezone."""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from sync_cleaning.config import OPERATING_TIMEZONE

logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def resolve_timezone(name: Optional[str] = None) -> ZoneInfo:
    """
    Resolve an IANA timezone name, falling back to OPERATING_TIMEZONE.

    Unknown names are logged and replaced by the operating timezone rather than
    failing a sync over a typo in a property record.

    Args:
        name: IANA timezone name (e.g. "Australia/Brisbane") or None

    Returns:
        ZoneInfo for the requested or operating timezone
    """
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("unknown_timezone", timezone=name, fallback=OPERATING_TIMEZONE)
    return ZoneInfo(OPERATING_TIMEZONE)


def today_in(name: Optional[str] = None) -> date:
    """
    Current calendar day in the given timezone.

    Example:
        >>> today_in("Australia/Brisbane").isoformat()
        '2025-06-04'
    """
    return datetime.now(resolve_timezone(name)).date()
