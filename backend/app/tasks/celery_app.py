"""Celery application configuration and beat schedule."""

from celery import Celery
from celery.schedules import crontab

from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "doujobs",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.tasks.scrape_tasks",
        "app.tasks.notification_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Europe/Kyiv",
    task_track_started=True,
    task_time_limit=1800,
    task_soft_time_limit=1740,
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)

celery_app.conf.beat_schedule = {
    "run-jobs-scraper": {
        "task": "app.tasks.scrape_tasks.run_jobs_scraper",
        "schedule": crontab(minute=f"*/{settings.jobs_scrape_every_minutes}"),
    },
    "send-new-job-notifications": {
        "task": "app.tasks.notification_tasks.send_new_job_notifications",
        "schedule": crontab(minute=f"5-59/{settings.notifications_every_minutes}"),
    },
    "discover-categories": {
        "task": "app.tasks.scrape_tasks.discover_categories",
        "schedule": crontab(minute=0, hour=3),
    },
    "discover-locations": {
        "task": "app.tasks.scrape_tasks.discover_locations",
        "schedule": crontab(minute=15, hour=3),
    },
}
