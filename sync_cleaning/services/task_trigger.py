"""
Run task generation after a reservation sync.

Generation runs in-process unless SITE_URL is configured, in which case it is
requested from the deployment's own /generate-cleaning-tasks endpoint.
"""

from typing import Any

import requests
import structlog
from sqlalchemy.engine import Engine

from sync_cleaning.config import ICAL_FETCH_TIMEOUT, SERVICE_TOKEN, SITE_URL
from sync_cleaning.errors import TaskGenerationError
from sync_cleaning.services.tasks import GenerationResult, generate_cleaning_tasks

logger = structlog.get_logger(__name__)


def request_task_generation(site_url: str, property_id: int) -> GenerationResult:
    """
    Ask a deployment of this service to generate tasks for a property.

    Args:
        site_url (str): Externally reachable base URL of the service.
        property_id (int): Property to generate tasks for.

    Returns:
        GenerationResult: Parsed from the endpoint's JSON response.

    Raises:
        TaskGenerationError: On a network failure or non-2xx response.
    """
    headers = {"Content-Type": "application/json"}
    if SERVICE_TOKEN:
        headers["Authorization"] = f"Bearer {SERVICE_TOKEN}"
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        headers["X-Request-ID"] = request_id

    url = f"{site_url}/generate-cleaning-tasks"
    try:
        res = requests.post(
            url, json={"property_id": property_id}, headers=headers, timeout=ICAL_FETCH_TIMEOUT * 4
        )
    except requests.RequestException as err:
        raise TaskGenerationError(f"Task generation request failed: {err}") from err

    try:
        body: dict[str, Any] = res.json()
    except ValueError:
        body = {}

    if not res.ok:
        error = body.get("error") or res.reason
        detail = body.get("detail")
        message = f"{error}: {detail}" if detail else str(error)
        logger.warning(
            "task_generation_request_failed",
            property_id=property_id,
            status_code=res.status_code,
            error=message,
        )
        raise TaskGenerationError(message)

    return GenerationResult(
        property_id=property_id,
        message=body.get("message", ""),
        created=int(body.get("created", 0)),
        updated=int(body.get("updated", 0)),
        skipped_completed=int(body.get("skippedCompleted", 0)),
    )


def trigger_task_generation(
    engine: Engine, property_id: int, dry_run: bool = False
) -> GenerationResult:
    """
    Generate tasks for a property, over HTTP when SITE_URL is set.

    Dry runs always stay in-process so nothing is written remotely.
    """
    if SITE_URL and not dry_run:
        return request_task_generation(SITE_URL, property_id)
    return generate_cleaning_tasks(engine, property_id, dry_run=dry_run)
