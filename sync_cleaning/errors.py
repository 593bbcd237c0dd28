"""
Exception hierarchy for the reservation sync and cleaning task pipeline.

Feed-level errors (FetchError, ParseError) are recorded per feed and never stop
sibling feeds. WriteError aborts the current property's sync. ConfigurationError
and PropertyNotFoundError abort task generation for one property.
"""

from __future__ import annotations

from typing import Optional


class SyncError(Exception):
    """Base class for all pipeline errors."""


class FetchError(SyncError):
    """A calendar feed could not be retrieved (non-2xx response or network failure)."""

    def __init__(self, url: str, status_code: Optional[int], reason: str):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            message = f"Failed to fetch iCal: {reason}"
        else:
            message = f"Failed to fetch iCal: {status_code} {reason}"
        super().__init__(message)


class ParseError(SyncError):
    """Feed body is not an iCalendar document."""


class ConfigurationError(SyncError):
    """Required reference data is missing (e.g. no "Clean" task type for the account)."""


class WriteError(SyncError):
    """The database rejected an upsert."""


class PropertyNotFoundError(SyncError):
    """Property does not exist for the requested owning account."""

    def __init__(self, property_id: int):
        self.property_id = property_id
        super().__init__(f"Property {property_id} not found")


class TaskGenerationError(SyncError):
    """Task generation requested over HTTP failed."""
