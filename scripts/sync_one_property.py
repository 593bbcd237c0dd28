import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from sync_cleaning.db.engine import engine
from sync_cleaning.logging_config import setup_logging
from sync_cleaning.services.sync import sync_property

logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Sync one property's feeds and generate its cleaning tasks from the command line.
    """
    parser = argparse.ArgumentParser(description="Sync a single property's iCal feeds.")
    parser.add_argument("property_id", type=int)
    parser.add_argument("platform_user_id", help="Owning account UUID")
    parser.add_argument("--url", help="Sync only this feed URL")
    parser.add_argument("--dry-run", action="store_true", help="Parse and log without writing")
    parser.add_argument("--verbose", action="store_true", help="Console-formatted DEBUG logs")
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else None)

    logger.info("manual_sync_started", property_id=args.property_id, dry_run=args.dry_run)

    try:
        result = sync_property(
            engine,
            args.property_id,
            args.platform_user_id,
            ical_url=args.url,
            dry_run=args.dry_run,
        )
    except Exception:
        logger.exception("manual_sync_failed", property_id=args.property_id)
        raise

    for feed in result.feeds:
        print(feed.to_dict())
    if result.tasks:
        print(result.tasks.to_dict())
    if result.task_error:
        print(f"Task generation failed: {result.task_error}")


if __name__ == "__main__":
    main()
