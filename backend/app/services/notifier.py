"""New-job notification fan-out.

One shared query fetches everything published after the oldest subscriber
watermark; each subscriber then gets the subset that is newer than their
own watermark and matches one of their subscriptions. After a subscriber's
batch is attempted their watermark moves to "now", whether or not every
send succeeded, so a message is attempted at most once.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from sqlalchemy.orm import Session, selectinload

from app.bot.formatters import format_job_message
from app.bot.keyboards import job_keyboard
from app.bot.telegram import TelegramClient
from app.models.job_posting import JobPosting, JobLocation
from app.models.subscriber import Subscriber
from app.models.subscription import Subscription

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (SQLite) as UTC so they compare with aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def subscription_matches(subscription: Subscription, job: JobPosting) -> bool:
    if subscription.category_id != job.category_id:
        return False
    wanted = subscription.location_ids
    # No location filter means the whole category
    if not wanted:
        return True
    return bool(wanted & job.location_ids)


def select_jobs_for_subscriber(
    jobs: Iterable[JobPosting],
    subscriptions: list[Subscription],
    last_notified_at: datetime | None,
) -> list[JobPosting]:
    watermark = as_utc(last_notified_at)
    selected = []
    for job in jobs:
        if watermark is not None and as_utc(job.published_at) <= watermark:
            continue
        if any(subscription_matches(sub, job) for sub in subscriptions):
            selected.append(job)
    return selected


@dataclass
class NotificationStats:
    subscribers: int = 0
    jobs: int = 0
    sent: int = 0
    errors: int = 0


class NotificationDispatcher:

    def __init__(
        self,
        db: Session,
        telegram: TelegramClient,
        webapp_url: str,
        delay_seconds: float = 0.05,
        description_limit: int = 220,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self.telegram = telegram
        self.webapp_url = webapp_url
        self.delay_seconds = delay_seconds
        self.description_limit = description_limit
        self.sleep = sleep
        self.clock = clock

    def send_new_job_notifications(self) -> NotificationStats:
        logger.info("Starting notification sender")
        stats = NotificationStats()

        floor = self.notification_floor()
        if floor is None:
            logger.info("No subscribers with subscriptions, nothing to do")
            return stats

        jobs = self.jobs_published_after(floor)
        stats.jobs = len(jobs)
        logger.info(f"Found {len(jobs)} new jobs since {floor.isoformat()}")
        if not jobs:
            return stats

        subscribers = self.subscribers_with_subscriptions()
        stats.subscribers = len(subscribers)
        logger.info(f"Processing notifications for {len(subscribers)} subscribers")

        for subscriber in subscribers:
            telegram_id = subscriber.telegram_id
            try:
                self.notify_subscriber(subscriber, jobs, stats)
            except Exception as e:
                self.db.rollback()
                stats.errors += 1
                logger.error(f"Failed to process subscriber {telegram_id}: {e}")

        logger.info(
            f"Notification sender completed: subscribers={stats.subscribers} "
            f"sent={stats.sent} errors={stats.errors}"
        )
        return stats

    def notify_subscriber(self, subscriber: Subscriber, jobs: list[JobPosting], stats: NotificationStats) -> None:
        matched = select_jobs_for_subscriber(jobs, subscriber.subscriptions, subscriber.last_notified_at)
        if matched:
            logger.info(f"Sending {len(matched)} jobs to subscriber {subscriber.telegram_id}")

        for job in matched:
            try:
                self.telegram.send_message(
                    subscriber.telegram_id,
                    format_job_message(job, self.description_limit),
                    reply_markup=job_keyboard(job, self.webapp_url),
                )
                stats.sent += 1
            except Exception as e:
                stats.errors += 1
                logger.error(f"Failed to send job {job.dou_id} to subscriber {subscriber.telegram_id}: {e}")
            # Telegram allows ~30 msg/s per bot
            self.sleep(self.delay_seconds)

        subscriber.last_notified_at = self.clock()
        self.db.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def notification_floor(self) -> datetime | None:
        """Oldest watermark among subscribers that have a subscription.

        A subscriber that was never notified pulls the floor to the epoch.
        Returns None when nobody is subscribed.
        """
        watermarks = [
            row.last_notified_at
            for row in self.db.query(Subscriber.last_notified_at)
            .filter(Subscriber.subscriptions.any())
            .all()
        ]
        if not watermarks:
            return None
        if any(value is None for value in watermarks):
            return EPOCH
        return min(as_utc(value) for value in watermarks)

    def jobs_published_after(self, floor: datetime) -> list[JobPosting]:
        return (
            self.db.query(JobPosting)
            .options(
                selectinload(JobPosting.company),
                selectinload(JobPosting.category),
                selectinload(JobPosting.locations).selectinload(JobLocation.location),
            )
            .filter(JobPosting.published_at > floor)
            .order_by(JobPosting.published_at.asc())
            .all()
        )

    def subscribers_with_subscriptions(self) -> list[Subscriber]:
        return (
            self.db.query(Subscriber)
            .options(
                selectinload(Subscriber.subscriptions).selectinload(Subscription.category),
                selectinload(Subscriber.subscriptions).selectinload(Subscription.locations),
            )
            .filter(Subscriber.subscriptions.any())
            .order_by(Subscriber.created_at)
            .all()
        )
