"""
Health and readiness check endpoints.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from sync_cleaning.db.engine import check_engine_health
from sync_cleaning.dependencies import get_db_engine
from sync_cleaning.utils.datetime import today_in

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness probe endpoint.

    Returns 200 with the current calendar day in the operating timezone, which is
    the "today" task generation uses. Does not touch the database.

    Example:
        >>> GET /health
        {"status": "healthy", "date": "2025-06-04"}
    """
    return JSONResponse(content={"status": "healthy", "date": today_in().isoformat()})


@router.get("/ready")
def readiness_check(engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 200 if the database is accessible, 503 otherwise.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok"}}
    """
    checks = {}

    if check_engine_health(engine):
        checks["database"] = "ok"
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", reason="database_not_accessible")
    checks["database"] = "failed"
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "checks": checks},
    )
