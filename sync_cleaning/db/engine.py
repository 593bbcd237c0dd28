"""
SQLAlchemy engine with connection pooling.

Route handlers receive this engine through the get_db_engine dependency and
services take it as an argument, so tests can substitute their own.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from sync_cleaning.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,  # Bulk syncs can idle long enough for connections to go stale
    pool_recycle=3600,
    echo=False,
)


def check_engine_health(db_engine: Engine = engine) -> bool:
    """
    Check if the database is reachable.

    Used by the /ready endpoint before the service receives traffic.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
