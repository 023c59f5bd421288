"""Run one jobs ingestion session in the foreground.

Usage:
    docker compose exec backend python -m scripts.run_jobs_scraper
"""

import logging
import sys

from app.config import get_settings
from app.tasks.scrape_tasks import run_jobs_scraper

logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    try:
        result = run_jobs_scraper()
    except Exception:
        logger.exception("Jobs scraper failed")
        return 1
    logger.info(f"Jobs scraper finished: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
