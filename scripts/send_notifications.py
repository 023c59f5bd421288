"""Send pending job notifications once.

Usage:
    docker compose exec backend python -m scripts.send_notifications
"""

import logging
import sys

from app.config import get_settings
from app.tasks.notification_tasks import send_new_job_notifications

logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    try:
        result = send_new_job_notifications()
    except Exception:
        logger.exception("Notification sender failed")
        return 1
    logger.info(f"Notification sender finished: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
