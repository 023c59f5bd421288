"""Company model — employers, upserted by their profile slug."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

UNKNOWN_COMPANY_SLUG = "unknown"
UNKNOWN_COMPANY_NAME = "Unknown Company"


class Company(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "companies"

    slug = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    logo_url = Column(String(500))

    # Relationships
    job_postings = relationship("JobPosting", back_populates="company")
