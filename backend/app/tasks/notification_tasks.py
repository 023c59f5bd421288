"""Notification delivery task."""

import logging
from dataclasses import asdict

import httpx

from app.config import get_settings
from app.container import create_notifier_container
from app.models.base import SyncSessionLocal
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.notification_tasks.send_new_job_notifications")
def send_new_job_notifications():
    """Fan new postings out to subscribers."""
    settings = get_settings()
    db = SyncSessionLocal()
    try:
        with httpx.Client(timeout=settings.http_timeout) as http:
            container = create_notifier_container(db, http, settings)
            stats = container.dispatcher.send_new_job_notifications()
        return asdict(stats)
    finally:
        db.close()
