"""Location discovery — reads the region filter on the vacancies page."""

import logging
import uuid
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

import httpx
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session

from app.models.location import Location, SOURCE_SCRAPER
from app.scrapers.base import fetch

logger = logging.getLogger(__name__)

REGION_LINK_SELECTOR = ".b-region-filter ul:nth-of-type(2) a"

# Not present in the region filter but used as filter values on the site
SYNTHETIC_LOCATIONS = [
    ("remote", "remote"),
    ("abroad", "relocation"),
]


@dataclass
class DiscoveredLocation:
    name: str
    slug: str


def parse_locations(html: str) -> list[DiscoveredLocation]:
    soup = BeautifulSoup(html, "lxml")
    locations = [DiscoveredLocation(name=name, slug=slug) for name, slug in SYNTHETIC_LOCATIONS]
    seen = {loc.slug for loc in locations}

    for link in soup.select(REGION_LINK_SELECTOR):
        name = link.get_text(strip=True)
        href = link.get("href") or ""
        city = parse_qs(urlsplit(href).query).get("city")
        if not name or not city:
            continue
        slug = city[0]
        if slug in seen:
            continue
        seen.add(slug)
        locations.append(DiscoveredLocation(name=name, slug=slug))
    return locations


class LocationDiscovery:

    def __init__(self, http: httpx.Client, db: Session, base_url: str):
        self.http = http
        self.db = db
        self.base_url = base_url.rstrip("/")

    def scrape(self) -> list[DiscoveredLocation]:
        url = f"{self.base_url}/vacancies"
        logger.info(f"Fetching locations from {url}")
        resp = fetch(self.http, url)
        locations = parse_locations(resp.text)
        logger.info(f"Found {len(locations)} locations")
        return locations

    def save(self, locations: list[DiscoveredLocation]) -> dict[str, int]:
        created = 0
        updated = 0
        for found in locations:
            existing = self.db.query(Location).filter(Location.slug == found.slug).first()
            if existing:
                existing.name = found.name
                updated += 1
            else:
                self.db.add(Location(
                    id=uuid.uuid4(),
                    name=found.name,
                    slug=found.slug,
                    source=SOURCE_SCRAPER,
                    is_active=True,
                ))
                created += 1
        self.db.commit()

        logger.info(f"Locations saved: total={len(locations)} created={created} updated={updated}")
        return {"total": len(locations), "created": created, "updated": updated}

    def run(self) -> dict[str, int]:
        return self.save(self.scrape())
