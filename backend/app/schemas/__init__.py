"""Pydantic schemas package."""

from app.schemas.common import ApiResponse
from app.schemas.catalog import CategoryRead, CompanySummary, LocationRead
from app.schemas.job_posting import JobPostingRead
from app.schemas.subscription import SubscriptionItem, SubscriptionRead, SubscriptionsUpdate
from app.schemas.scrape_session import ScrapeSessionRead

__all__ = [
    "ApiResponse",
    # Catalog
    "CategoryRead",
    "CompanySummary",
    "LocationRead",
    # JobPosting
    "JobPostingRead",
    # Subscriptions
    "SubscriptionItem",
    "SubscriptionRead",
    "SubscriptionsUpdate",
    # ScrapeSession
    "ScrapeSessionRead",
]
