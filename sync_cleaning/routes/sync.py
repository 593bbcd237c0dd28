from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from sync_cleaning.config import DRY_RUN
from sync_cleaning.dependencies import get_db_engine, require_service_token
from sync_cleaning.errors import PropertyNotFoundError
from sync_cleaning.routes._helpers import error_response
from sync_cleaning.schemas.pipeline import SyncICalPayload
from sync_cleaning.services.sync import sync_all_properties, sync_property

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_service_token)])


@router.post("/sync-ical")
def sync_ical(
    payload: Optional[SyncICalPayload] = None,
    dry_run: Optional[bool] = Query(None, description="Override DRY_RUN setting"),
    engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Sync all active feeds of one property, then generate its cleaning tasks.

    Returns:
        JSONResponse:
            200 with syncedReservations, per-feed results and the nested task
                generation result;
            400 if property_id or platform_user_id is missing;
            404 if the property does not belong to the account;
            500 if reservations could not be saved, or if they were saved but
                task generation failed (error "Reservations saved, but task
                generation failed");
            502 if no feed could be fetched or parsed.
    """
    if payload is None or payload.property_id is None or payload.platform_user_id is None:
        return error_response(400, "Missing property_id or platform_user_id")

    use_dry_run = DRY_RUN if dry_run is None else dry_run

    try:
        result = sync_property(
            engine,
            payload.property_id,
            str(payload.platform_user_id),
            ical_url=payload.ical_url,
            dry_run=use_dry_run,
        )
    except PropertyNotFoundError as e:
        return error_response(404, str(e))
    except Exception as e:
        logger.exception("ical_sync_failed", property_id=payload.property_id, error=str(e))
        return error_response(500, "iCal sync failed", detail=str(e))

    feeds = [feed.to_dict() for feed in result.feeds]

    if result.write_error:
        return error_response(
            500, "Failed to save reservations", detail=result.write_error, feeds=feeds
        )

    fetched = [feed for feed in result.feeds if feed.status != "skipped"]
    if fetched and not result.feeds_succeeded:
        return error_response(502, "iCal sync failed", detail=feeds)

    if result.task_error:
        return error_response(
            500,
            "Reservations saved, but task generation failed",
            details=result.task_error,
            syncedReservations=result.synced_reservations,
            feeds=feeds,
        )

    return JSONResponse(
        content={
            "message": "iCal synced successfully",
            "syncedReservations": result.synced_reservations,
            "feeds": feeds,
            "taskGeneration": result.tasks.to_dict() if result.tasks else None,
        }
    )


@router.get("/sync-ical-all")
def sync_ical_all(
    dry_run: Optional[bool] = Query(None, description="Override DRY_RUN setting"),
    engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Sync every active property and generate tasks for each.

    Per-property failures are reported in results; the response is 200 unless
    the list of properties itself cannot be read.

    Example:
        >>> GET /sync-ical-all
        {"message": "Sync complete", "stats": {...},
         "results": [{"propertyId": 1, "icalUrl": "https://...", "status": "success"}]}
    """
    use_dry_run = DRY_RUN if dry_run is None else dry_run

    try:
        bulk = sync_all_properties(engine, dry_run=use_dry_run)
    except Exception as e:
        logger.exception("bulk_sync_failed", error=str(e))
        return error_response(500, "Unexpected error", detail=str(e))

    return JSONResponse(
        content={
            "message": "Sync complete",
            "stats": bulk.stats(),
            "results": [record.to_dict() for record in bulk.results],
        }
    )
