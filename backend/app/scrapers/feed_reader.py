"""RSS feed reader for the vacancy feeds.

Feeds live at /vacancies/feeds/ (all categories) and
/vacancies/feeds/?category=<slug>. Item links point at the vacancy page and
may carry tracking query parameters.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlsplit, urlunsplit

import feedparser
import httpx
from dateutil import parser as date_parser

from app.scrapers.base import FetchError, fetch

logger = logging.getLogger(__name__)

DOU_ID_PATTERN = re.compile(r"/vacancies/(\d+)/")
FEED_ACCEPT = "application/rss+xml, application/xml, text/xml, */*"


def clean_url(url: str) -> str:
    """Drop the query string (and fragment), keep scheme, host and path."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        logger.warning(f"Failed to parse URL: {url}")
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def extract_dou_id(url: str) -> int | None:
    """'.../companies/eleks/vacancies/328133/' -> 328133; None when absent."""
    match = DOU_ID_PATTERN.search(url)
    return int(match.group(1)) if match else None


def parse_published_at(value: str | None, now: datetime | None = None) -> datetime:
    """Parse an ISO-8601 or RFC-822 timestamp into an aware UTC datetime.

    Missing or unparseable values fall back to ``now``.
    """
    now = now or datetime.now(timezone.utc)
    if not value:
        return now

    try:
        parsed = date_parser.isoparse(value)
    except ValueError:
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            logger.warning(f"Unparseable publish date {value!r}, using current time")
            return now

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class FeedItem:
    link: str
    title: str
    published_at: datetime
    content: str | None = None  # content:encoded
    content_snippet: str | None = None  # description

    @property
    def url(self) -> str:
        return clean_url(self.link)

    @property
    def dou_id(self) -> int | None:
        return extract_dou_id(self.url)

    @property
    def short_description(self) -> str:
        return self.content or self.content_snippet or ""


def _entry_to_item(entry) -> FeedItem:
    content = None
    if entry.get("content"):
        content = entry.content[0].get("value") or None

    return FeedItem(
        link=(entry.get("link") or "").strip(),
        title=(entry.get("title") or "").strip(),
        content=content,
        content_snippet=entry.get("summary") or None,
        published_at=parse_published_at(entry.get("published") or entry.get("updated")),
    )


def parse_feed(document: bytes | str, url: str = "") -> list[FeedItem]:
    parsed = feedparser.parse(document)
    if parsed.bozo and not parsed.entries:
        raise FetchError(url, f"Unreadable feed: {parsed.get('bozo_exception')}")
    return [_entry_to_item(entry) for entry in parsed.entries]


class FeedReader:
    """Fetches a feed over HTTP and returns its items in document order."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def read(self, url: str) -> list[FeedItem]:
        """Raises FetchError when the feed is unreachable or not a feed."""
        logger.debug(f"Parsing RSS feed: {url}")
        resp = fetch(self.http, url, accept=FEED_ACCEPT)
        items = parse_feed(resp.content, url)
        logger.debug(f"Feed {url} returned {len(items)} items")
        return items
