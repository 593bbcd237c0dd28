"""
Internal helpers shared by the pipeline route handlers.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse


def error_response(
    status_code: int, error: str, detail: Optional[Any] = None, **extra: Any
) -> JSONResponse:
    """
    Build a JSON error body of the shape {"error": ..., "detail"?: ...}.

    Args:
        status_code: HTTP status code
        error: Short description of what failed
        detail: Underlying error message or payload (omitted when None)
        extra: Additional top-level keys

    Returns:
        JSONResponse
    """
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = detail
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def parse_property_id(raw: str) -> Optional[int]:
    """
    Parse a property ID path segment, returning None when it is not an integer.
    """
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
