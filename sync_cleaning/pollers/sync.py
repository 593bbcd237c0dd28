import structlog

from sync_cleaning.config import DRY_RUN
from sync_cleaning.db.engine import engine
from sync_cleaning.logging_config import setup_logging
from sync_cleaning.services.sync import sync_all_properties

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    # Run a full sync across all active properties
    result = sync_all_properties(engine, dry_run=DRY_RUN)
    logger.info("bulk_sync_finished", **result.stats())


if __name__ == "__main__":
    main()
