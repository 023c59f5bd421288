"""Vacancy detail page extractor.

Page layout (jobs.dou.ua/companies/<company>/vacancies/<id>/):
    title        .l-vacancy h1.g-h2
    salary       .l-vacancy .sh-info .salary
    locations    .place-name  ("Kyiv, Lviv, remote")
    description  .b-typo.vacancy-section  (fallback: .vacancy-section)
    company      .b-compinfo .l-n a  (href /companies/<slug>/)
    logo         .b-compinfo .logo img

Every field parser takes the parsed document and returns a value or an
empty/absent marker; none of them raise. Only fetching the page can fail.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from app.models.company import UNKNOWN_COMPANY_NAME, UNKNOWN_COMPANY_SLUG
from app.scrapers.base import fetch

logger = logging.getLogger(__name__)

COMPANY_HREF_PATTERN = re.compile(r"/companies/([^/]+)/")


@dataclass
class CompanyInfo:
    name: str
    slug: str
    logo_url: str | None = None


@dataclass
class JobPageData:
    title: str
    company_name: str
    company_slug: str
    full_description: str
    locations: list[str] = field(default_factory=list)
    company_logo_url: str | None = None
    salary: str | None = None

    @property
    def has_known_company(self) -> bool:
        return self.company_slug != UNKNOWN_COMPANY_SLUG


def parse_title(soup: BeautifulSoup) -> str:
    el = soup.select_one(".l-vacancy h1.g-h2")
    title = el.get_text(strip=True) if el else ""
    if not title:
        logger.warning("Could not find title element on page")
    return title


def parse_company(soup: BeautifulSoup, base_url: str) -> CompanyInfo:
    link = soup.select_one(".b-compinfo .l-n a")
    name = link.get_text(strip=True) if link else ""
    href = (link.get("href") or "") if link else ""

    match = COMPANY_HREF_PATTERN.search(href)
    slug = match.group(1) if match else ""

    if not name or not slug:
        logger.warning(f"Could not find company name or slug on page (name={name!r}, href={href!r})")

    return CompanyInfo(
        name=name or UNKNOWN_COMPANY_NAME,
        slug=slug or UNKNOWN_COMPANY_SLUG,
        logo_url=parse_logo_url(soup, base_url),
    )


def parse_logo_url(soup: BeautifulSoup, base_url: str) -> str | None:
    img = soup.select_one(".b-compinfo .logo img")
    src = (img.get("src") or "").strip() if img else ""
    if not src:
        return None
    if src.startswith("//"):
        return f"https:{src}"
    return urljoin(base_url + "/", src)


def parse_salary(soup: BeautifulSoup) -> str | None:
    el = soup.select_one(".l-vacancy .sh-info .salary")
    salary = el.get_text(strip=True) if el else ""
    return salary or None


def parse_full_description(soup: BeautifulSoup) -> str:
    """Inner HTML of the vacancy body."""
    el = soup.select_one(".b-typo.vacancy-section") or soup.select_one(".vacancy-section")
    if el is None:
        logger.warning("Could not find description element on page")
        return ""
    return el.decode_contents().strip()


def parse_locations(soup: BeautifulSoup) -> list[str]:
    """Split the header place list on commas, keeping first-seen order."""
    el = soup.select_one(".place-name")
    text = el.get_text(strip=True) if el else ""

    locations: list[str] = []
    for part in text.split(","):
        name = part.strip()
        if name and name not in locations:
            locations.append(name)
    return locations


def parse_job_page(html: str, base_url: str) -> JobPageData:
    soup = BeautifulSoup(html, "lxml")
    company = parse_company(soup, base_url)
    return JobPageData(
        title=parse_title(soup),
        company_name=company.name,
        company_slug=company.slug,
        company_logo_url=company.logo_url,
        salary=parse_salary(soup),
        full_description=parse_full_description(soup),
        locations=parse_locations(soup),
    )


class PageExtractor:
    """Fetches a vacancy page and turns it into JobPageData."""

    def __init__(self, http: httpx.Client, base_url: str):
        self.http = http
        self.base_url = base_url.rstrip("/")

    def extract(self, url: str) -> JobPageData:
        """Raises FetchError when the page is unreachable; never on markup problems."""
        logger.debug(f"Fetching job page: {url}")
        resp = fetch(self.http, url)
        data = parse_job_page(resp.text, self.base_url)
        logger.debug(
            f"Scraped {url}: title={data.title!r} company={data.company_slug} "
            f"salary={'yes' if data.salary else 'no'} locations={len(data.locations)}"
        )
        return data
