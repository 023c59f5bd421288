"""Tests for the incremental dou_id frontier."""

from datetime import datetime, timezone

import httpx

from app.scrapers.feed_reader import FeedReader, parse_feed
from app.services.frontier import FrontierTracker

GLOBAL_FEED_URL = "https://jobs.dou.ua/vacancies/feeds/"
PUBLISHED = datetime(2024, 1, 15, tzinfo=timezone.utc)


def _link(dou_id):
    return f"https://jobs.dou.ua/companies/acme/vacancies/{dou_id}/"


def _tracker(db, http):
    return FrontierTracker(db, FeedReader(http), GLOBAL_FEED_URL)


def test_watermark_is_zero_for_empty_store(db, mock_http):
    assert _tracker(db, mock_http({})).current_watermark() == 0


def test_watermark_is_highest_persisted_id(db, mock_http, make_category, make_job):
    category = make_category()
    make_job(100, category, PUBLISHED)
    make_job(250, category, PUBLISHED)

    assert _tracker(db, mock_http({})).current_watermark() == 250


def test_no_new_work_when_feed_max_equals_watermark(db, mock_http, rss_feed, make_category, make_job):
    make_job(101, make_category(), PUBLISHED)
    http = mock_http({GLOBAL_FEED_URL: (200, rss_feed([{"link": _link(101)}, {"link": _link(99)}]))})

    assert _tracker(db, http).has_new_work() is False


def test_new_work_when_feed_has_higher_id(db, mock_http, rss_feed, make_category, make_job):
    make_job(101, make_category(), PUBLISHED)
    http = mock_http({GLOBAL_FEED_URL: (200, rss_feed([{"link": _link(102)}]))})

    assert _tracker(db, http).has_new_work() is True


def test_fails_open_when_feed_is_unreachable(db, mock_http):
    http = mock_http({GLOBAL_FEED_URL: httpx.ConnectError("dns failure")})

    assert _tracker(db, http).has_new_work() is True


def test_fails_open_when_no_item_has_an_id(db, mock_http, rss_feed, make_category, make_job):
    make_job(500, make_category(), PUBLISHED)
    feed = rss_feed([{"link": "https://jobs.dou.ua/companies/acme/"}])
    http = mock_http({GLOBAL_FEED_URL: (200, feed)})

    assert _tracker(db, http).has_new_work() is True


def test_select_unprocessed_splits_items(db, mock_http, rss_feed, make_category, make_job):
    make_job(100, make_category(), PUBLISHED)
    items = parse_feed(rss_feed([
        {"link": _link(101)},
        {"link": _link(100)},
        {"link": _link(42)},
        {"link": "https://jobs.dou.ua/companies/acme/"},
    ]))

    selection = _tracker(db, mock_http({})).select_unprocessed(items)

    assert selection.watermark == 100
    assert [item.dou_id for item in selection.candidates] == [101]
    assert len(selection.unidentifiable) == 1
    assert selection.already_known == 2
