"""jobs.dou.ua scrapers: RSS feeds, vacancy pages and filter discovery."""

from app.scrapers.base import FetchError, build_http_client  # noqa: F401
from app.scrapers.feed_reader import FeedItem, FeedReader  # noqa: F401
from app.scrapers.page_extractor import JobPageData, PageExtractor  # noqa: F401
