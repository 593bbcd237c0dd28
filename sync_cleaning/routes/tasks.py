from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from sync_cleaning.config import DRY_RUN
from sync_cleaning.dependencies import get_db_engine, require_service_token
from sync_cleaning.errors import ConfigurationError, PropertyNotFoundError, WriteError
from sync_cleaning.routes._helpers import error_response
from sync_cleaning.schemas.pipeline import GenerateTasksPayload
from sync_cleaning.services.tasks import generate_cleaning_tasks

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_service_token)])


@router.post("/generate-cleaning-tasks")
def generate_cleaning_tasks_endpoint(
    payload: Optional[GenerateTasksPayload] = None,
    dry_run: Optional[bool] = Query(None, description="Override DRY_RUN setting"),
    engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Generate or refresh cleaning tasks for one property.

    Args:
        payload: Body with property_id
        dry_run: Override DRY_RUN setting (optional)
        engine: Database engine

    Returns:
        JSONResponse: 200 with message and counts (including the zero-task
        outcomes), 400 without property_id, 404 for an unknown property, 500 on
        missing configuration or write failure.
    """
    if payload is None or payload.property_id is None:
        return error_response(400, "Missing property_id")

    property_id = payload.property_id
    use_dry_run = DRY_RUN if dry_run is None else dry_run

    try:
        result = generate_cleaning_tasks(engine, property_id, dry_run=use_dry_run)
    except PropertyNotFoundError as e:
        return error_response(404, str(e))
    except ConfigurationError as e:
        logger.error("task_generation_misconfigured", property_id=property_id, error=str(e))
        return error_response(500, str(e))
    except WriteError as e:
        return error_response(500, "Failed to upsert tasks", detail=str(e))
    except Exception as e:
        logger.exception("task_generation_failed", property_id=property_id, error=str(e))
        return error_response(500, "Unexpected error", detail=str(e))

    return JSONResponse(content=result.to_dict())
