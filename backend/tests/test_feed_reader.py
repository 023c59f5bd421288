"""Tests for RSS feed reading and URL helpers."""

from datetime import datetime, timezone

import pytest

from app.scrapers.base import FetchError
from app.scrapers.feed_reader import (
    FeedReader,
    clean_url,
    extract_dou_id,
    parse_feed,
    parse_published_at,
)

FEED_URL = "https://jobs.dou.ua/vacancies/feeds/?category=python"


def test_clean_url_drops_query_and_fragment():
    url = "https://jobs.dou.ua/companies/eleks/vacancies/328133/?utm_source=jobsrss#apply"

    assert clean_url(url) == "https://jobs.dou.ua/companies/eleks/vacancies/328133/"


def test_clean_url_returns_unparseable_input_unchanged():
    assert clean_url("not a url") == "not a url"


def test_extract_dou_id():
    assert extract_dou_id("https://jobs.dou.ua/companies/eleks/vacancies/328133/") == 328133
    assert extract_dou_id("https://jobs.dou.ua/companies/eleks/") is None


def test_parse_published_at_handles_iso_and_rfc822():
    expected = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    assert parse_published_at("2024-01-15T10:00:00.000Z") == expected
    assert parse_published_at("Mon, 15 Jan 2024 12:00:00 +0200") == expected


def test_parse_published_at_falls_back_to_now():
    now = datetime(2025, 5, 1, tzinfo=timezone.utc)

    assert parse_published_at(None, now=now) == now
    assert parse_published_at("yesterday-ish", now=now) == now


def test_parse_feed_reads_items_in_document_order(rss_feed):
    document = rss_feed([
        {"link": "https://jobs.dou.ua/companies/a/vacancies/2/?utm_source=jobsrss", "title": "Second"},
        {"link": "https://jobs.dou.ua/companies/a/vacancies/1/", "title": "First"},
    ])

    items = parse_feed(document, FEED_URL)

    assert [item.title for item in items] == ["Second", "First"]
    first = items[0]
    assert first.url == "https://jobs.dou.ua/companies/a/vacancies/2/"
    assert first.dou_id == 2
    assert first.short_description == "<p>Short description from RSS</p>"
    assert first.published_at == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def test_short_description_uses_snippet_without_content(rss_feed):
    document = rss_feed([{"link": "https://jobs.dou.ua/companies/a/vacancies/3/", "content": ""}])

    (item,) = parse_feed(document, FEED_URL)

    assert item.short_description == "Short description"


def test_read_raises_fetch_error_on_http_failure(mock_http):
    http = mock_http({FEED_URL: (503, "unavailable")})

    with pytest.raises(FetchError):
        FeedReader(http).read(FEED_URL)


def test_read_raises_fetch_error_for_non_feed_document(mock_http):
    http = mock_http({FEED_URL: (200, "\x00\x01 definitely not xml <<<")})

    with pytest.raises(FetchError):
        FeedReader(http).read(FEED_URL)


def test_read_returns_items(mock_http, rss_feed):
    http = mock_http({FEED_URL: (200, rss_feed([{"link": "https://jobs.dou.ua/companies/a/vacancies/9/"}]))})

    items = FeedReader(http).read(FEED_URL)

    assert [item.dou_id for item in items] == [9]
    assert "rss" in http.seen[0].headers["Accept"]
