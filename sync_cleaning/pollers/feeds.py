import json
from typing import Optional

import structlog

from sync_cleaning.config import DEBUG
from sync_cleaning.metrics import feed_poll_duration, feed_polls
from sync_cleaning.network.ical import fetch_ical
from sync_cleaning.normalizers.ical import ParseResult, parse_ical

logger = structlog.get_logger(__name__)


def poll_feed(
    url: str,
    property_id: int,
    platform: Optional[str] = None,
    timezone: Optional[str] = None,
) -> ParseResult:
    """
    Fetch one iCal feed and parse it into normalized reservation records.

    Args:
        url (str): Feed URL
        property_id (int): Property the feed belongs to (for metrics and logs)
        platform (Optional[str]): Platform label stored with the feed
        timezone (Optional[str]): Property timezone for calendar-day conversion

    Returns:
        ParseResult: Accepted records and rejected events

    Raises:
        FetchError: If the feed cannot be downloaded
        ParseError: If the body is not an iCalendar document
    """
    with feed_poll_duration.labels(property_id=str(property_id)).time():
        try:
            ical_text = fetch_ical(url)
            result = parse_ical(ical_text, ical_url=url, platform=platform, timezone=timezone)

            if DEBUG and result.accepted:
                logger.debug("Sample reservation:\n%s", json.dumps(result.accepted[0], indent=2))

            logger.info(
                "Parsed %d reservations from iCal feed [property_id=%s]",
                len(result.accepted),
                property_id,
            )

            feed_polls.labels(property_id=str(property_id), status="success").inc()
            return result
        except Exception:
            feed_polls.labels(property_id=str(property_id), status="failure").inc()
            raise
