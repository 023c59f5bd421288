"""Category discovery — reads the category selector on the source front page."""

import logging
import uuid
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session

from app.models.job_category import JobCategory
from app.scrapers.base import fetch

logger = logging.getLogger(__name__)

CATEGORY_OPTION_SELECTOR = ".b-jobs-search select[name=category] option"


@dataclass
class DiscoveredCategory:
    name: str
    slug: str
    url: str
    rss_url: str


def parse_categories(html: str, base_url: str) -> list[DiscoveredCategory]:
    soup = BeautifulSoup(html, "lxml")
    categories = []
    for option in soup.select(CATEGORY_OPTION_SELECTOR):
        slug = (option.get("value") or "").strip()
        name = option.get_text(strip=True)
        # The "all categories" option has an empty value
        if not slug or not name:
            continue
        encoded = quote(slug, safe="")
        categories.append(DiscoveredCategory(
            name=name,
            slug=slug,
            url=f"{base_url}/vacancies/?category={encoded}",
            rss_url=f"{base_url}/vacancies/feeds/?category={encoded}",
        ))
    return categories


class CategoryDiscovery:

    def __init__(self, http: httpx.Client, db: Session, base_url: str):
        self.http = http
        self.db = db
        self.base_url = base_url.rstrip("/")

    def scrape(self) -> list[DiscoveredCategory]:
        logger.info(f"Fetching categories from {self.base_url}")
        resp = fetch(self.http, f"{self.base_url}/")
        categories = parse_categories(resp.text, self.base_url)
        logger.info(f"Found {len(categories)} categories")
        return categories

    def save(self, categories: list[DiscoveredCategory]) -> dict[str, int]:
        """Upsert by slug. The active flag is only set on creation."""
        created = 0
        updated = 0
        for found in categories:
            existing = self.db.query(JobCategory).filter(JobCategory.slug == found.slug).first()
            if existing:
                existing.name = found.name
                existing.url = found.url
                existing.rss_url = found.rss_url
                updated += 1
            else:
                self.db.add(JobCategory(
                    id=uuid.uuid4(),
                    name=found.name,
                    slug=found.slug,
                    url=found.url,
                    rss_url=found.rss_url,
                    is_active=True,
                ))
                created += 1
                logger.info(f"Created new category: {found.name} ({found.slug})")
        self.db.commit()

        logger.info(f"Categories saved: total={len(categories)} created={created} updated={updated}")
        return {"total": len(categories), "created": created, "updated": updated}

    def run(self) -> dict[str, int]:
        return self.save(self.scrape())
