"""Tests for subscriber matching and notification delivery."""

import json
from datetime import datetime, timedelta, timezone

from app.bot.telegram import TelegramClient
from app.models.subscriber import Subscriber
from app.services import notifier
from app.services.notifier import (
    EPOCH,
    NotificationDispatcher,
    NotificationStats,
    as_utc,
    select_jobs_for_subscriber,
)

TOKEN = "123:abc"
SEND_URL = f"https://api.telegram.org/bot{TOKEN}/sendMessage"
NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def _dispatcher(db, http, sleeps=None):
    return NotificationDispatcher(
        db,
        TelegramClient(http, TOKEN),
        webapp_url="https://webapp.example.com",
        delay_seconds=0.05,
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
        clock=lambda: NOW,
    )


def _sent_chat_ids(http):
    return [json.loads(request.content)["chat_id"] for request in http.seen]


def test_empty_subscription_locations_match_the_whole_category(db, make_category, make_location, make_job, make_subscriber):
    python = make_category("python")
    java = make_category("java")
    kyiv = make_location("kyiv")
    job_python = make_job(1, python, NOW, locations=[kyiv])
    job_java = make_job(2, java, NOW)
    subscriber = make_subscriber([(python, [])])

    matched = select_jobs_for_subscriber([job_python, job_java], subscriber.subscriptions, None)

    assert matched == [job_python]


def test_location_filter_requires_overlap(db, make_category, make_location, make_job, make_subscriber):
    python = make_category("python")
    kyiv = make_location("kyiv")
    lviv = make_location("lviv")
    remote = make_location("remote")
    in_kyiv = make_job(1, python, NOW, locations=[kyiv, remote])
    in_lviv = make_job(2, python, NOW, locations=[lviv])
    nowhere = make_job(3, python, NOW)
    subscriber = make_subscriber([(python, [kyiv])])

    matched = select_jobs_for_subscriber([in_kyiv, in_lviv, nowhere], subscriber.subscriptions, None)

    assert matched == [in_kyiv]


def test_jobs_at_or_before_watermark_are_excluded(db, make_category, make_job, make_subscriber):
    python = make_category("python")
    old = make_job(1, python, NOW - timedelta(hours=2))
    boundary = make_job(2, python, NOW - timedelta(hours=1))
    fresh = make_job(3, python, NOW)
    subscriber = make_subscriber([(python, [])], last_notified_at=NOW - timedelta(hours=1))

    matched = select_jobs_for_subscriber([old, boundary, fresh], subscriber.subscriptions, subscriber.last_notified_at)

    assert matched == [fresh]


def test_sends_matching_jobs_in_publication_order(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    java = make_category("java")
    make_job(2, python, NOW - timedelta(minutes=5), title="Later")
    earlier = make_job(1, python, NOW - timedelta(minutes=30), title="Earlier")
    make_job(3, java, NOW - timedelta(minutes=10))
    subscriber = make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})
    sleeps = []

    stats = _dispatcher(db, http, sleeps).send_new_job_notifications()

    assert stats.sent == 2
    assert stats.errors == 0
    assert stats.jobs == 3
    texts = [json.loads(request.content)["text"] for request in http.seen]
    assert texts[0].startswith("<b>Earlier.")
    assert texts[1].startswith("<b>Later.")
    assert sleeps == [0.05, 0.05]
    payload = json.loads(http.seen[0].content)
    assert payload["chat_id"] == subscriber.telegram_id
    assert payload["parse_mode"] == "HTML"
    assert payload["reply_markup"]["inline_keyboard"][0][0]["web_app"]["url"].endswith(f"/#/job/{earlier.id}")
    db.refresh(subscriber)
    assert as_utc(subscriber.last_notified_at) == NOW


def test_watermark_advances_even_when_every_send_fails(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    make_job(1, python, NOW - timedelta(minutes=30))
    make_job(2, python, NOW - timedelta(minutes=20))
    subscriber = make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (403, {"ok": False, "error_code": 403, "description": "Forbidden: bot was blocked"})})
    sleeps = []

    stats = _dispatcher(db, http, sleeps).send_new_job_notifications()

    assert stats.sent == 0
    assert stats.errors == 2
    assert len(sleeps) == 2
    db.refresh(subscriber)
    assert as_utc(subscriber.last_notified_at) == NOW


def test_watermark_advances_for_subscriber_without_matches(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    java = make_category("java")
    make_job(1, python, NOW - timedelta(minutes=30))
    java_fan = make_subscriber([(java, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})

    stats = _dispatcher(db, http).send_new_job_notifications()

    assert stats.sent == 0
    assert http.seen == []
    db.refresh(java_fan)
    assert as_utc(java_fan.last_notified_at) == NOW


def test_subscribers_without_subscriptions_are_ignored(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    make_job(1, python, NOW - timedelta(minutes=30))
    lurker = make_subscriber([])
    active = make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})

    stats = _dispatcher(db, http).send_new_job_notifications()

    assert stats.subscribers == 1
    assert _sent_chat_ids(http) == [active.telegram_id]
    db.refresh(lurker)
    assert lurker.last_notified_at is None


def test_second_pass_sends_nothing_new(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    make_job(1, python, NOW - timedelta(minutes=30))
    make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})
    dispatcher = _dispatcher(db, http)

    first = dispatcher.send_new_job_notifications()
    second = dispatcher.send_new_job_notifications()

    assert first.sent == 1
    assert second.sent == 0
    assert len(http.seen) == 1


def test_notification_floor(db, mock_http, make_category, make_subscriber):
    python = make_category("python")
    dispatcher = _dispatcher(db, mock_http({}))
    assert dispatcher.notification_floor() is None

    make_subscriber([(python, [])], last_notified_at=NOW)
    make_subscriber([(python, [])], last_notified_at=NOW - timedelta(days=1))
    assert dispatcher.notification_floor() == NOW - timedelta(days=1)

    make_subscriber([(python, [])])
    assert dispatcher.notification_floor() == EPOCH
    assert db.query(Subscriber).count() == 3


def test_failing_subscriber_is_counted_and_the_run_continues(db, mock_http, make_category, make_job, make_subscriber, monkeypatch):
    python = make_category("python")
    make_job(1, python, NOW - timedelta(minutes=30))
    first = make_subscriber([(python, [])])
    second = make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})
    calls = []

    def flaky_select(jobs, subscriptions, last_notified_at):
        calls.append(subscriptions)
        if len(calls) == 1:
            raise RuntimeError("corrupt subscription row")
        return select_jobs_for_subscriber(jobs, subscriptions, last_notified_at)

    monkeypatch.setattr(notifier, "select_jobs_for_subscriber", flaky_select)

    stats = _dispatcher(db, http).send_new_job_notifications()

    assert stats == NotificationStats(subscribers=2, jobs=1, sent=1, errors=1)
    assert len(calls) == 2
    db.refresh(first)
    db.refresh(second)
    watermarks = sorted(
        [as_utc(first.last_notified_at), as_utc(second.last_notified_at)],
        key=lambda value: value is not None,
    )
    # The failed subscriber keeps its old watermark and gets the jobs next run
    assert watermarks == [None, NOW]
    assert len(_sent_chat_ids(http)) == 1


def test_delay_applies_to_every_message_across_subscribers(db, mock_http, make_category, make_job, make_subscriber):
    python = make_category("python")
    make_job(1, python, NOW - timedelta(minutes=30))
    make_job(2, python, NOW - timedelta(minutes=20))
    first = make_subscriber([(python, [])])
    second = make_subscriber([(python, [])])
    http = mock_http({SEND_URL: (200, {"ok": True, "result": {}})})
    sleeps = []

    stats = _dispatcher(db, http, sleeps).send_new_job_notifications()

    assert stats.sent == 4
    assert sleeps == [0.05] * 4
    assert sorted(_sent_chat_ids(http)) == sorted([first.telegram_id] * 2 + [second.telegram_id] * 2)
