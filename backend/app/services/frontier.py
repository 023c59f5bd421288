"""Incremental frontier — decides which feed items are not yet persisted.

A single global watermark (highest persisted dou_id) is shared by every
category. It is re-read for each category, so postings saved while an
earlier category was processed move the cutoff for later ones and a
vacancy listed in several category feeds is only processed once.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.job_posting import JobPosting
from app.scrapers.feed_reader import FeedItem, FeedReader

logger = logging.getLogger(__name__)


@dataclass
class FrontierSelection:
    watermark: int
    candidates: list[FeedItem] = field(default_factory=list)
    unidentifiable: list[FeedItem] = field(default_factory=list)
    already_known: int = 0


class FrontierTracker:

    def __init__(self, db: Session, feed_reader: FeedReader, global_feed_url: str):
        self.db = db
        self.feed_reader = feed_reader
        self.global_feed_url = global_feed_url

    def current_watermark(self) -> int:
        return self.db.query(func.max(JobPosting.dou_id)).scalar() or 0

    def has_new_work(self) -> bool:
        """Compare the aggregate feed's newest id with the watermark.

        Fails open: an unreadable feed, or one without a single parseable
        id, counts as "there is new work".
        """
        logger.info("Checking for new jobs in global RSS feed")
        try:
            items = self.feed_reader.read(self.global_feed_url)
        except Exception as e:
            logger.error(f"Failed to read global feed, assuming new jobs exist: {e}")
            return True

        feed_ids = [item.dou_id for item in items if item.dou_id is not None]
        if not feed_ids:
            logger.warning(f"Could not extract any dou_id from {len(items)} global feed items")
            return True

        max_feed_id = max(feed_ids)
        watermark = self.current_watermark()
        has_new = max_feed_id > watermark
        logger.info(f"Global RSS check: max_feed_id={max_feed_id} watermark={watermark} has_new_jobs={has_new}")
        return has_new

    def select_unprocessed(self, items: list[FeedItem]) -> FrontierSelection:
        """Keep items whose id is strictly above the current watermark.

        Items without an id are returned separately so the caller can
        account for them.
        """
        selection = FrontierSelection(watermark=self.current_watermark())
        for item in items:
            dou_id = item.dou_id
            if dou_id is None:
                logger.warning(f"Could not extract dou_id from feed item link: {item.link}")
                selection.unidentifiable.append(item)
            elif dou_id > selection.watermark:
                selection.candidates.append(item)
            else:
                selection.already_known += 1
        return selection
