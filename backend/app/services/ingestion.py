"""Jobs ingestion — drives one scrape session across every active category.

Per run:
    1. open a ScrapeSession (in_progress)
    2. short-circuit as success when the aggregate feed has nothing newer
       than the persisted watermark
    3. for each active category: read its feed, keep items above the
       watermark, enrich each from its detail page and upsert it
    4. close the session as success / partial / failed with the counters

A bad item never stops its category and a bad category never stops the
run. Only failures around the session record itself escape.
"""

import enum
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.company import Company
from app.models.job_category import JobCategory
from app.models.job_posting import JobPosting, JobLocation
from app.models.location import Location, SOURCE_JOB_PARSER, location_slug
from app.models.scrape_session import (
    ScrapeSession,
    STATUS_FAILED,
    STATUS_IN_PROGRESS,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
)
from app.scrapers.base import FetchError
from app.scrapers.feed_reader import FeedItem, FeedReader
from app.scrapers.page_extractor import JobPageData, PageExtractor
from app.services.frontier import FrontierTracker

logger = logging.getLogger(__name__)


class ItemOutcome(str, enum.Enum):
    ADDED = "added"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class IngestionStats:
    processed: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    categories_processed: int = 0
    error_details: list[str] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> None:
        if outcome is ItemOutcome.ADDED:
            self.added += 1
        elif outcome is ItemOutcome.UPDATED:
            self.updated += 1
        elif outcome is ItemOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    def record_category_failure(self, slug: str, error: Exception) -> None:
        self.errors += 1
        self.error_details.append(f"{slug}: {error}")

    def final_status(self) -> str:
        if self.errors and not (self.added or self.updated):
            return STATUS_FAILED
        if self.errors:
            return STATUS_PARTIAL
        return STATUS_SUCCESS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobIngestionService:

    def __init__(
        self,
        db: Session,
        feed_reader: FeedReader,
        page_extractor: PageExtractor,
        frontier: FrontierTracker,
        unknown_company_policy: str = "keep",
    ):
        self.db = db
        self.feed_reader = feed_reader
        self.page_extractor = page_extractor
        self.frontier = frontier
        self.unknown_company_policy = unknown_company_policy

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> ScrapeSession:
        """Execute one scrape session and return its journal record.

        Re-raises anything that escapes the per-category handling after
        marking the session failed.
        """
        started = time.monotonic()
        logger.info("Starting jobs scraper")

        session = ScrapeSession(id=uuid.uuid4(), started_at=_utcnow(), status=STATUS_IN_PROGRESS)
        self.db.add(session)
        self.db.commit()

        try:
            if not self.frontier.has_new_work():
                logger.info("No new jobs found, exiting early")
                self._finalize(session, STATUS_SUCCESS, started)
                return session

            categories = self.active_categories()
            if not categories:
                logger.warning("No active categories found, nothing to scrape")
                self._finalize(session, STATUS_SUCCESS, started)
                return session

            stats = IngestionStats()
            for category in categories:
                slug = category.slug
                try:
                    self.process_category(category, stats)
                except Exception as e:
                    self.db.rollback()
                    stats.record_category_failure(slug, e)
                    logger.error(f"Category {slug} failed, continuing with next: {e}")

            status = stats.final_status()
            self._finalize(session, status, started, stats)
            logger.info(
                f"Jobs scraper completed: status={status} categories={len(categories)} "
                f"processed={stats.processed} added={stats.added} updated={stats.updated} "
                f"skipped={stats.skipped} errors={stats.errors}"
            )
            return session

        except Exception as e:
            logger.error(f"Jobs scraper failed: {e}")
            self._mark_failed(session, started, e)
            raise

    def active_categories(self) -> list[JobCategory]:
        categories = (
            self.db.query(JobCategory)
            .filter(JobCategory.is_active == True)  # noqa: E712
            .order_by(JobCategory.name)
            .all()
        )
        logger.info(f"Active categories found: {len(categories)}")
        return categories

    def _finalize(self, session: ScrapeSession, status: str, started: float, stats: IngestionStats | None = None):
        session.status = status
        session.completed_at = _utcnow()
        session.duration_ms = int((time.monotonic() - started) * 1000)
        if stats is not None:
            session.total_jobs_processed = stats.processed
            session.total_jobs_added = stats.added
            session.total_jobs_updated = stats.updated
            session.total_jobs_skipped = stats.skipped
            session.total_errors = stats.errors
            session.categories_processed = stats.categories_processed
            session.last_processed_dou_id = self.frontier.current_watermark() or None
            session.error_details = "\n".join(stats.error_details) or None
        self.db.commit()

    def _mark_failed(self, session: ScrapeSession, started: float, error: Exception):
        try:
            self.db.rollback()
            session.status = STATUS_FAILED
            session.error_details = str(error)[:2000]
            session.completed_at = _utcnow()
            session.duration_ms = int((time.monotonic() - started) * 1000)
            self.db.commit()
        except Exception as e:
            logger.error(f"Could not mark scrape session {session.id} as failed: {e}")

    # ------------------------------------------------------------------
    # Category / item processing
    # ------------------------------------------------------------------

    def process_category(self, category: JobCategory, stats: IngestionStats) -> None:
        """Process one category feed. Raises when the feed cannot be read."""
        logger.info(f"Processing category {category.slug}")
        items = self.feed_reader.read(category.rss_url)
        selection = self.frontier.select_unprocessed(items)
        logger.info(
            f"[{category.slug}] feed={len(items)} unprocessed={len(selection.candidates)} "
            f"unidentifiable={len(selection.unidentifiable)} watermark={selection.watermark}"
        )

        for item in selection.unidentifiable:
            stats.record(ItemOutcome.ERROR)

        added_before, updated_before = stats.added, stats.updated
        for item in selection.candidates:
            stats.processed += 1
            stats.record(self.process_item(item, category))

        stats.categories_processed += 1
        logger.info(
            f"[{category.slug}] complete: added={stats.added - added_before} "
            f"updated={stats.updated - updated_before}"
        )

    def process_item(self, item: FeedItem, category: JobCategory) -> ItemOutcome:
        try:
            page = self.page_extractor.extract(item.url)
        except FetchError as e:
            logger.error(f"[{category.slug}] Failed to fetch job page {item.url}: {e}")
            return ItemOutcome.ERROR
        except Exception as e:
            logger.exception(f"[{category.slug}] Failed to scrape job page {item.url}: {e}")
            return ItemOutcome.ERROR

        if not page.has_known_company and self.unknown_company_policy == "skip":
            logger.warning(f"[{category.slug}] Skipping {item.url}: company could not be identified")
            return ItemOutcome.SKIPPED

        try:
            return self.save_posting(item, page, category)
        except Exception as e:
            self.db.rollback()
            logger.error(f"[{category.slug}] Failed to save job {item.dou_id}: {e}")
            return ItemOutcome.ERROR

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_posting(self, item: FeedItem, page: JobPageData, category: JobCategory) -> ItemOutcome:
        """Create or update the posting and replace its locations, then commit."""
        company = self.upsert_company(page.company_slug, page.company_name, page.company_logo_url)

        fields = {
            "title": page.title or item.title,
            "url": item.url,
            "company_id": company.id,
            "category_id": category.id,
            "description": item.short_description,
            "full_description": page.full_description,
            "salary": page.salary,
            "published_at": item.published_at,
        }

        posting = self.db.query(JobPosting).filter(JobPosting.dou_id == item.dou_id).first()
        if posting is None:
            posting = JobPosting(
                id=uuid.uuid4(),
                dou_id=item.dou_id,
                **fields,
            )
            self.db.add(posting)
            outcome = ItemOutcome.ADDED
        else:
            for key, value in fields.items():
                setattr(posting, key, value)
            outcome = ItemOutcome.UPDATED

        self.replace_locations(posting, page.locations)
        self.db.commit()

        logger.debug(f"Job {outcome.value}: dou_id={item.dou_id} title={fields['title']!r}")
        return outcome

    def upsert_company(self, slug: str, name: str, logo_url: str | None = None) -> Company:
        company = self.db.query(Company).filter(Company.slug == slug).first()
        if company is None:
            company = Company(id=uuid.uuid4(), slug=slug, name=name, logo_url=logo_url)
            self.db.add(company)
            return company

        company.name = name
        if logo_url:
            company.logo_url = logo_url
        return company

    def upsert_location(self, name: str) -> Location | None:
        slug = location_slug(name)
        if not slug:
            logger.warning(f"Location {name!r} has no usable slug, ignoring")
            return None

        location = self.db.query(Location).filter(Location.slug == slug).first()
        if location is None:
            location = Location(
                id=uuid.uuid4(),
                name=name,
                slug=slug,
                source=SOURCE_JOB_PARSER,
                is_active=True,
            )
            self.db.add(location)
        else:
            location.name = name
        return location

    def replace_locations(self, posting: JobPosting, names: list[str]) -> None:
        """Drop every existing association and re-create them from names."""
        self.db.query(JobLocation).filter(
            JobLocation.job_posting_id == posting.id,
        ).delete(synchronize_session=False)

        by_slug: dict[str, str] = {}
        for name in names:
            by_slug.setdefault(location_slug(name), name)

        for name in by_slug.values():
            location = self.upsert_location(name)
            if location is None:
                continue
            self.db.add(JobLocation(id=uuid.uuid4(), job_posting_id=posting.id, location_id=location.id))
