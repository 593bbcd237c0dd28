import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = os.getenv("DB_SCHEMA", "public")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

# Calendar day used for "today" in task generation and /health
OPERATING_TIMEZONE = os.getenv("OPERATING_TIMEZONE", "Australia/Brisbane")

ICAL_FETCH_TIMEOUT = float(os.getenv("ICAL_FETCH_TIMEOUT", "15"))

SYNC_MAX_WORKERS = max(1, int(os.getenv("SYNC_MAX_WORKERS", "1")))

# When set, task generation after a sync is requested from this deployment over HTTP
SITE_URL = os.getenv("SITE_URL", "").rstrip("/") or None

SERVICE_TOKEN = os.getenv("SERVICE_TOKEN") or None
