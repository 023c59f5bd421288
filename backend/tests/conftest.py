"""Shared fixtures: in-memory SQLite session, fake HTTP and data builders."""

import uuid
from datetime import datetime, timezone
from email.utils import format_datetime

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    Base,
    Company,
    JobCategory,
    JobLocation,
    JobPosting,
    Location,
    Subscriber,
    Subscription,
    SubscriptionLocation,
)

BASE_URL = "https://jobs.dou.ua"
GLOBAL_FEED_URL = f"{BASE_URL}/vacancies/feeds/"


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def mock_http():
    """Build an httpx.Client answering from a ``{url: response}`` map.

    A response is ``(status, body)`` or an exception instance to raise.
    Unknown URLs get a 404. Every request is appended to ``client.seen``.
    """
    clients = []

    def factory(routes: dict) -> httpx.Client:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            answer = routes.get(str(request.url))
            if answer is None:
                return httpx.Response(404, text="not found")
            if isinstance(answer, Exception):
                raise answer
            status, body = answer
            if isinstance(body, (dict, list)):
                return httpx.Response(status, json=body)
            return httpx.Response(status, text=body)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        client.seen = seen
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


def _rss_item(item: dict) -> str:
    published = item.get("published_at", datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))
    content = item.get("content", "<p>Short description from RSS</p>")
    return (
        "<item>"
        f"<title>{item.get('title', 'Vacancy')}</title>"
        f"<link>{item['link']}</link>"
        f"<pubDate>{format_datetime(published)}</pubDate>"
        f"<description><![CDATA[{item.get('snippet', 'Short description')}]]></description>"
        f"<content:encoded><![CDATA[{content}]]></content:encoded>"
        "</item>"
    )


@pytest.fixture
def rss_feed():
    """``rss_feed([{"link": ..., "title": ...}, ...])`` -> RSS 2.0 document."""

    def build(items: list[dict]) -> str:
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">'
            "<channel><title>DOU vacancies</title><link>https://jobs.dou.ua/vacancies/</link>"
            + "".join(_rss_item(item) for item in items)
            + "</channel></rss>"
        )

    return build


@pytest.fixture
def job_page():
    """Render a vacancy detail page with the given fields."""

    def build(
        title: str = "Senior QA Engineer",
        company_name: str | None = "Tech Company",
        company_slug: str | None = "tech-company",
        places: str = "Kyiv, remote",
        salary: str | None = "$2000–3000",
        logo: str | None = "/company-logos/tech-company.png",
    ) -> str:
        salary_html = f'<div class="sh-info"><span class="salary">{salary}</span></div>' if salary else ""
        logo_html = f'<div class="logo"><img src="{logo}" /></div>' if logo else ""
        company_html = ""
        if company_name is not None:
            href = f"/companies/{company_slug}/" if company_slug else "/jobs/"
            company_html = f'<div class="l-n"><a href="{href}">{company_name}</a></div>'
        return f"""
        <html><body>
          <div class="l-vacancy">
            <h1 class="g-h2">{title}</h1>
            {salary_html}
            <div class="place-name">{places}</div>
            <div class="b-typo vacancy-section"><p>We are looking for a talented engineer</p></div>
          </div>
          <div class="b-compinfo">{logo_html}{company_html}</div>
        </body></html>
        """

    return build


def vacancy_url(dou_id: int, company: str = "tech-company") -> str:
    return f"{BASE_URL}/companies/{company}/vacancies/{dou_id}/"


@pytest.fixture
def make_category(db):
    def create(slug: str = "python", name: str | None = None, is_active: bool = True) -> JobCategory:
        category = JobCategory(
            id=uuid.uuid4(),
            slug=slug,
            name=name or slug.title(),
            url=f"{BASE_URL}/vacancies/?category={slug}",
            rss_url=f"{BASE_URL}/vacancies/feeds/?category={slug}",
            is_active=is_active,
        )
        db.add(category)
        db.commit()
        return category

    return create


@pytest.fixture
def make_location(db):
    def create(slug: str, name: str | None = None) -> Location:
        location = Location(id=uuid.uuid4(), slug=slug, name=name or slug.title(), source="scraper")
        db.add(location)
        db.commit()
        return location

    return create


@pytest.fixture
def make_job(db):
    companies: dict[str, Company] = {}

    def create(
        dou_id: int,
        category: JobCategory,
        published_at: datetime,
        locations: list[Location] = (),
        title: str = "Python Developer",
        company_slug: str = "tech-company",
    ) -> JobPosting:
        company = companies.get(company_slug)
        if company is None:
            company = Company(id=uuid.uuid4(), slug=company_slug, name="Tech Company")
            companies[company_slug] = company
            db.add(company)
        job = JobPosting(
            id=uuid.uuid4(),
            dou_id=dou_id,
            company=company,
            category=category,
            title=title,
            url=vacancy_url(dou_id, company_slug),
            description="<p>Short description</p>",
            full_description="<p>Full</p>",
            published_at=published_at,
        )
        job.locations = [JobLocation(id=uuid.uuid4(), location=loc) for loc in locations]
        db.add(job)
        db.commit()
        return job

    return create


@pytest.fixture
def make_subscriber(db):
    counter = iter(range(1000, 10_000))

    def create(
        subscriptions: list[tuple[JobCategory, list[Location]]] = (),
        last_notified_at: datetime | None = None,
    ) -> Subscriber:
        subscriber = Subscriber(id=uuid.uuid4(), telegram_id=next(counter), last_notified_at=last_notified_at)
        for category, locations in subscriptions:
            subscriber.subscriptions.append(Subscription(
                id=uuid.uuid4(),
                category=category,
                locations=[SubscriptionLocation(id=uuid.uuid4(), location=loc) for loc in locations],
            ))
        db.add(subscriber)
        db.commit()
        return subscriber

    return create
