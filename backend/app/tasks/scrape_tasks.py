"""Scrape orchestration tasks."""

import logging

from app.config import get_settings
from app.container import create_scraper_container
from app.models.base import SyncSessionLocal
from app.scrapers.base import build_http_client
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.scrape_tasks.run_jobs_scraper")
def run_jobs_scraper():
    """Run one ingestion session across all active categories."""
    settings = get_settings()
    db = SyncSessionLocal()
    try:
        with build_http_client(settings) as http:
            container = create_scraper_container(db, http, settings)
            session = container.ingestion.run()
        return {
            "session_id": str(session.id),
            "status": session.status,
            "added": session.total_jobs_added,
            "updated": session.total_jobs_updated,
            "errors": session.total_errors,
        }
    finally:
        db.close()


@celery_app.task(name="app.tasks.scrape_tasks.discover_categories")
def discover_categories():
    """Refresh the category registry from the source front page."""
    settings = get_settings()
    db = SyncSessionLocal()
    try:
        with build_http_client(settings) as http:
            result = create_scraper_container(db, http, settings).category_discovery.run()
        logger.info(f"Category discovery finished: {result}")
        return result
    finally:
        db.close()


@celery_app.task(name="app.tasks.scrape_tasks.discover_locations")
def discover_locations():
    """Refresh known locations from the vacancies region filter."""
    settings = get_settings()
    db = SyncSessionLocal()
    try:
        with build_http_client(settings) as http:
            result = create_scraper_container(db, http, settings).location_discovery.run()
        logger.info(f"Location discovery finished: {result}")
        return result
    finally:
        db.close()
