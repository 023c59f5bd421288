"""Seed or refresh categories and locations from the source site.

Usage:
    docker compose exec backend python -m scripts.discover_sources
    docker compose exec backend python -m scripts.discover_sources --only categories
"""

import argparse
import logging
import sys

from app.config import get_settings
from app.tasks.scrape_tasks import discover_categories, discover_locations

logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Discover categories and locations")
    parser.add_argument("--only", choices=["categories", "locations"], help="Run a single discovery step")
    args = parser.parse_args()

    try:
        if args.only in (None, "categories"):
            logger.info(f"Categories: {discover_categories()}")
        if args.only in (None, "locations"):
            logger.info(f"Locations: {discover_locations()}")
    except Exception:
        logger.exception("Discovery failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
