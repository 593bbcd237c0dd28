"""
Client for downloading iCal feeds from booking platforms.

Some providers reject script-like user agents, so requests are sent with
desktop-browser headers.
"""

import time

import requests
import structlog

from sync_cleaning.config import ICAL_FETCH_TIMEOUT
from sync_cleaning.errors import FetchError
from sync_cleaning.metrics import feed_fetch_latency, feed_fetches

logger = structlog.get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/calendar, text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def fetch_ical(url: str, timeout: float = ICAL_FETCH_TIMEOUT) -> str:
    """
    Download the raw text of a calendar feed.

    There is no retry: a failed feed is retried by the next sync run.

    Args:
        url (str): Feed URL.
        timeout (float): Seconds to wait for the provider.

    Returns:
        str: Raw calendar text.

    Raises:
        FetchError: On a non-2xx response or when no response was received.
    """
    logger.debug("Requesting iCal feed %s", url)

    start_time = time.time()
    try:
        res = requests.get(url, headers=BROWSER_HEADERS, timeout=timeout)
    except requests.RequestException as err:
        feed_fetches.labels(status_code="error").inc()
        logger.warning("feed_request_failed", url=url, error=str(err))
        raise FetchError(url, None, str(err)) from err
    finally:
        feed_fetch_latency.observe(time.time() - start_time)

    feed_fetches.labels(status_code=str(res.status_code)).inc()

    if not res.ok:
        logger.warning("feed_fetch_failed", url=url, status_code=res.status_code, reason=res.reason)
        raise FetchError(url, res.status_code, res.reason or "")

    # Providers often omit the charset; requests would then assume ISO-8859-1
    if "charset" not in res.headers.get("Content-Type", "").lower():
        res.encoding = "utf-8"

    return res.text
