"""
FastAPI dependency injection providers.

Routes receive the database engine through get_db_engine so tests can swap it
with app.dependency_overrides. require_service_token guards the pipeline routes
when SERVICE_TOKEN is configured.
"""

from __future__ import annotations

import hmac
from typing import Generator, Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.engine import Engine

from sync_cleaning.config import SERVICE_TOKEN
from sync_cleaning.db.engine import engine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> mock_engine = Mock(spec=Engine)
        >>> app.dependency_overrides[get_db_engine] = lambda: mock_engine
    """
    yield engine


def require_service_token(authorization: Optional[str] = Header(None)) -> None:
    """
    Reject the request unless it carries the configured service token.

    No-op when SERVICE_TOKEN is unset.

    Raises:
        HTTPException: 401 if the bearer token is missing or wrong
    """
    if not SERVICE_TOKEN:
        return

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), SERVICE_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing service token",
        )
