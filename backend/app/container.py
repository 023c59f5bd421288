"""Composition root — builds the pipeline components for one task run.

Every component receives its collaborators explicitly; callers own the
database session and HTTP client and close them.
"""

from dataclasses import dataclass

import httpx
from sqlalchemy.orm import Session

from app.bot.telegram import TelegramClient
from app.config import Settings, get_settings
from app.scrapers.categories import CategoryDiscovery
from app.scrapers.feed_reader import FeedReader
from app.scrapers.locations import LocationDiscovery
from app.scrapers.page_extractor import PageExtractor
from app.services.frontier import FrontierTracker
from app.services.ingestion import JobIngestionService
from app.services.notifier import NotificationDispatcher


@dataclass
class ScraperContainer:
    feed_reader: FeedReader
    page_extractor: PageExtractor
    frontier: FrontierTracker
    ingestion: JobIngestionService
    category_discovery: CategoryDiscovery
    location_discovery: LocationDiscovery


@dataclass
class NotifierContainer:
    telegram: TelegramClient
    dispatcher: NotificationDispatcher


def create_scraper_container(db: Session, http: httpx.Client, settings: Settings | None = None) -> ScraperContainer:
    settings = settings or get_settings()

    feed_reader = FeedReader(http)
    page_extractor = PageExtractor(http, settings.dou_base_url)
    frontier = FrontierTracker(db, feed_reader, settings.global_feed_url)
    ingestion = JobIngestionService(
        db,
        feed_reader=feed_reader,
        page_extractor=page_extractor,
        frontier=frontier,
        unknown_company_policy=settings.unknown_company_policy,
    )

    return ScraperContainer(
        feed_reader=feed_reader,
        page_extractor=page_extractor,
        frontier=frontier,
        ingestion=ingestion,
        category_discovery=CategoryDiscovery(http, db, settings.dou_base_url),
        location_discovery=LocationDiscovery(http, db, settings.dou_base_url),
    )


def create_notifier_container(db: Session, http: httpx.Client, settings: Settings | None = None) -> NotifierContainer:
    settings = settings or get_settings()

    telegram = TelegramClient(http, settings.telegram_bot_token, settings.telegram_api_url)
    dispatcher = NotificationDispatcher(
        db,
        telegram,
        webapp_url=settings.webapp_url,
        delay_seconds=settings.notification_delay_ms / 1000,
        description_limit=settings.notification_description_limit,
    )
    return NotifierContainer(telegram=telegram, dispatcher=dispatcher)
