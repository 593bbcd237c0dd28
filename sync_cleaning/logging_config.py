"""
structlog setup shared by the API, the cron entrypoint and the scripts.

Every event carries the service name and, inside a request, the request_id and
path bound by RequestIDMiddleware. DEBUG renders for a terminal; any other
level renders one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, Optional

import structlog

from sync_cleaning.config import LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

SERVICE_NAME = "sync-cleaning"

# Per-request access lines and per-feed HTTP chatter drown out sync events
QUIET_LOGGERS = ("urllib3", "requests", "sqlalchemy.engine", "uvicorn.access")


def _add_service(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Log level name; defaults to LOG_LEVEL from the environment.
            Scripts pass "DEBUG" for console output while investigating a feed.
    """
    level = (level or LOG_LEVEL).upper()
    console = level == "DEBUG"

    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_service,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if console:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
