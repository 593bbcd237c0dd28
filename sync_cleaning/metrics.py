"""
Prometheus metrics for feed syncs, reservation upserts and task generation.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from sync_cleaning.metrics import feed_poll_duration, reservations_synced
    >>> with feed_poll_duration.labels(property_id="12").time():
    ...     result = poll_feed(url)
    ...     reservations_synced.labels(property_id="12").inc(len(result.accepted))
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Feed Metrics
# =============================================================================

feed_fetches = Counter(
    "ical_feed_fetches_total",
    "Total iCal feed requests made",
    ["status_code"],
)
"""
Counter for feed requests.

Labels:
    status_code: HTTP status code, or "error" when no response was received
"""

feed_fetch_latency = Histogram(
    "ical_feed_fetch_latency_seconds",
    "iCal feed request latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
)

feed_polls = Counter(
    "ical_feed_polls_total",
    "Total feed polls (fetch + parse), success and failure",
    ["property_id", "status"],
)

feed_poll_duration = Histogram(
    "ical_feed_poll_duration_seconds",
    "Duration of feed polls in seconds",
    ["property_id"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

events_rejected = Counter(
    "ical_events_rejected_total",
    "Calendar events dropped by the parser",
    ["reason"],
)
"""
Counter for rejected events.

Labels:
    reason: blocked, missing_uid, missing_start, missing_end, invalid_dates
"""

# =============================================================================
# Pipeline Metrics
# =============================================================================

reservations_synced = Counter(
    "reservations_synced_total",
    "Total reservations written (created or updated)",
    ["property_id"],
)

tasks_generated = Counter(
    "cleaning_tasks_generated_total",
    "Total cleaning tasks created or updated by generation",
    ["priority_tag"],
)

property_syncs = Counter(
    "property_syncs_total",
    "Property sync outcomes",
    ["status"],
)
"""
Counter for property syncs.

Labels:
    status: success, partial, failed, skipped
"""

bulk_sync_duration = Histogram(
    "bulk_sync_duration_seconds",
    "Duration of a full sync across all active properties",
    buckets=(1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, float("inf")),
)
