"""Models package — import every model so relationship strings resolve."""

from app.models.base import Base
from app.models.company import Company
from app.models.job_category import JobCategory
from app.models.location import Location
from app.models.job_posting import JobPosting, JobLocation
from app.models.subscriber import Subscriber
from app.models.subscription import Subscription, SubscriptionLocation
from app.models.scrape_session import ScrapeSession

__all__ = [
    "Base",
    "Company",
    "JobCategory",
    "Location",
    "JobPosting",
    "JobLocation",
    "Subscriber",
    "Subscription",
    "SubscriptionLocation",
    "ScrapeSession",
]
