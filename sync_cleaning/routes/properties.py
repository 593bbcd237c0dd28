"""
Read-only feed metadata lookups for a property.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from sync_cleaning.db.readers.properties import has_active_ical, list_icals
from sync_cleaning.dependencies import get_db_engine
from sync_cleaning.routes._helpers import error_response, parse_property_id

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/property/{property_id}/icals")
def get_property_icals(property_id: str, engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """List every feed of a property with its platform label and active flag."""
    parsed_id = parse_property_id(property_id)
    if parsed_id is None:
        return error_response(400, "Invalid property ID")

    try:
        with engine.connect() as conn:
            icals = list_icals(conn, parsed_id)
    except Exception as e:
        logger.exception("property_icals_lookup_failed", property_id=parsed_id, error=str(e))
        return error_response(500, "Database operation failed")

    return JSONResponse(content={"icals": icals})


@router.get("/property/{property_id}/has-ical")
def property_has_ical(property_id: str, engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """Report whether a property has at least one active feed."""
    parsed_id = parse_property_id(property_id)
    if parsed_id is None:
        return error_response(400, "Invalid property ID")

    try:
        with engine.connect() as conn:
            has_ical = has_active_ical(conn, parsed_id)
    except Exception as e:
        logger.exception("has_ical_lookup_failed", property_id=parsed_id, error=str(e))
        return error_response(500, "Internal server error")

    return JSONResponse(content={"hasIcal": has_ical})
