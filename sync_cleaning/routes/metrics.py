"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP ical_feed_polls_total Total feed polls (fetch + parse), success and failure
        # TYPE ical_feed_polls_total counter
        ical_feed_polls_total{property_id="12",status="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Return metrics in Prometheus text exposition format.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
