"""
Parse raw iCal feeds into normalized reservation records.

Each VEVENT becomes one record keyed by its UID. Events that cannot become a
reservation (blocking placeholders, missing UID or dates) are returned as
rejections with a reason instead of being dropped silently.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import structlog
from icalendar import Calendar

from sync_cleaning.errors import ParseError
from sync_cleaning.metrics import events_rejected
from sync_cleaning.utils.datetime import resolve_timezone

logger = structlog.get_logger(__name__)

BLOCKED_PATTERN = re.compile(r"not\s+available|\bblocked\b", re.IGNORECASE)
GENERIC_SUMMARY_PATTERN = re.compile(r"\((.+?)\)\s*-\s*by\s*(.+)", re.IGNORECASE)
RESERVED_PATTERN = re.compile(r"\breserved\b", re.IGNORECASE)
CHANNEL_PATTERN = re.compile(r"Channel:\s*([^ \n]+)", re.IGNORECASE)
SUMMARY_SOURCE_PATTERN = re.compile(r"\(([^()]+)\)")

# Checked in order against the feed URL
PLATFORM_DOMAINS = (
    ("airbnb.com", "Airbnb"),
    ("guesty.com", "Guesty"),
    ("vrbo.com", "Vrbo"),
    ("booking.com", "Booking.com"),
    ("hostaway.com", "Hostaway"),
)

DEFAULT_SOURCE = "Other"
DEFAULT_STATUS = "confirmed"


@dataclass
class ParseResult:
    """Accepted reservation records and rejected events of one feed."""

    accepted: list[dict[str, Any]] = field(default_factory=list)
    rejected: list[dict[str, Any]] = field(default_factory=list)

    def reject(self, uid: Optional[str], summary: str, reason: str) -> None:
        self.rejected.append({"uid": uid, "summary": summary, "reason": reason})
        events_rejected.labels(reason=reason).inc()


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def extract_guest_name(summary: str) -> Optional[str]:
    """
    Derive the guest name from an event summary.

    "(airbnbOfficial) - by Hostaway" style summaries carry no name and map to
    "Guest". Summaries mentioning "reserved" are placeholders and give None.

    Example:
        >>> extract_guest_name("John Smith")
        'John Smith'
        >>> extract_guest_name("Reserved") is None
        True
    """
    summary = summary.strip()
    if not summary:
        return None
    if GENERIC_SUMMARY_PATTERN.search(summary):
        return "Guest"
    if RESERVED_PATTERN.search(summary):
        return None
    return summary


def resolve_booking_source(
    summary: str, description: str, ical_url: str, platform: Optional[str] = None
) -> str:
    """
    Resolve the booking platform label of an event.

    Order: "Channel: <token>" in the description, a parenthesized token in the
    summary, the feed URL's domain, the feed's platform label, then "Other".
    """
    match = CHANNEL_PATTERN.search(description)
    if match:
        return match.group(1)

    match = SUMMARY_SOURCE_PATTERN.search(summary)
    if match:
        return match.group(1)

    url = (ical_url or "").lower()
    for domain, label in PLATFORM_DOMAINS:
        if domain in url:
            return label

    if platform and platform.strip():
        return platform.strip()

    return DEFAULT_SOURCE


def _calendar_day(value: Any, tz: ZoneInfo) -> Optional[date]:
    # datetime is a date subclass, so it must be checked first
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def parse_ical(
    ical_text: str,
    ical_url: str = "",
    platform: Optional[str] = None,
    timezone: Optional[str] = None,
) -> ParseResult:
    """
    Parse raw iCal text into normalized reservation records.

    Args:
        ical_text (str): Raw calendar text.
        ical_url (str): Feed URL, used to infer the booking platform.
        platform (Optional[str]): Platform label stored with the feed.
        timezone (Optional[str]): Timezone that zoned event times are converted to
            before taking the calendar day. Defaults to the operating timezone.

    Returns:
        ParseResult: accepted records with keys reservation_uid, start_date,
            end_date (YYYY-MM-DD), guest_name, source, status, notes; and
            rejected events with uid, summary and reason.

    Raises:
        ParseError: If the text is not an iCalendar document.
    """
    if "BEGIN:VCALENDAR" not in (ical_text or "").upper():
        raise ParseError("Feed is not an iCalendar document")

    try:
        calendar = Calendar.from_ical(ical_text)
    except (ValueError, IndexError, KeyError) as err:
        raise ParseError(f"Invalid iCalendar data: {err}") from err

    tz = resolve_timezone(timezone)
    result = ParseResult()

    for event in calendar.walk("VEVENT"):
        summary = _text(event.get("SUMMARY"))
        description = _text(event.get("DESCRIPTION"))
        uid = _text(event.get("UID")) or None

        if BLOCKED_PATTERN.search(summary):
            result.reject(uid, summary, "blocked")
            continue

        if not uid:
            result.reject(None, summary, "missing_uid")
            continue

        dtstart = event.get("DTSTART")
        dtend = event.get("DTEND")
        if dtstart is None:
            result.reject(uid, summary, "missing_start")
            continue
        if dtend is None:
            result.reject(uid, summary, "missing_end")
            continue

        try:
            start_date = _calendar_day(getattr(dtstart, "dt", None), tz)
            end_date = _calendar_day(getattr(dtend, "dt", None), tz)
        except ValueError:
            # icalendar keeps unparseable values as broken properties that raise on .dt
            start_date = end_date = None
        if start_date is None or end_date is None or end_date < start_date:
            result.reject(uid, summary, "invalid_dates")
            continue

        status = event.get("STATUS")
        status_text = _text(status).lower() if isinstance(status, str) else ""

        result.accepted.append(
            {
                "reservation_uid": uid,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "guest_name": extract_guest_name(summary),
                "source": resolve_booking_source(summary, description, ical_url, platform),
                "status": status_text or DEFAULT_STATUS,
                "notes": description or None,
            }
        )

    if result.rejected:
        reasons: dict[str, int] = {}
        for rejection in result.rejected:
            reasons[rejection["reason"]] = reasons.get(rejection["reason"], 0) + 1
        logger.info(
            "ical_events_rejected",
            url=ical_url,
            accepted=len(result.accepted),
            rejected=len(result.rejected),
            reasons=reasons,
        )

    return result
