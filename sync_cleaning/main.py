# sync_cleaning/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sync_cleaning.config import ALLOWED_ORIGINS, OPERATING_TIMEZONE, SITE_URL, SYNC_MAX_WORKERS
from sync_cleaning.logging_config import setup_logging
from sync_cleaning.middleware import RequestIDMiddleware
from sync_cleaning.routes.health import router as health_router
from sync_cleaning.routes.metrics import router as metrics_router
from sync_cleaning.routes.properties import router as properties_router
from sync_cleaning.routes.sync import router as sync_router
from sync_cleaning.routes.tasks import router as tasks_router

setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Cleaning Ops Sync API",
    description="iCal reservation sync and cleaning task generation",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(tasks_router, tags=["Tasks"])
app.include_router(sync_router, tags=["Sync"])
app.include_router(properties_router, tags=["Properties"])

logger.info(
    "application_configured",
    operating_timezone=OPERATING_TIMEZONE,
    sync_max_workers=SYNC_MAX_WORKERS,
    task_generation="http" if SITE_URL else "in_process",
)
