"""Location model — cities and pseudo-locations (remote, relocation)."""

import re

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

# Provenance tags
SOURCE_SCRAPER = "scraper"  # discovered from the vacancies region filter
SOURCE_JOB_PARSER = "job_parser"  # discovered on a posting detail page


def location_slug(name: str) -> str:
    """Derive a slug from a free-text location name.

    Lowercase, whitespace runs become a hyphen, everything outside
    ``[a-z0-9-]`` is dropped: ``"Limassol (Cyprus)"`` -> ``"limassol-cyprus"``.
    """
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


class Location(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "locations"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    source = Column(String(20), nullable=False, default=SOURCE_JOB_PARSER)  # scraper, job_parser
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    job_locations = relationship("JobLocation", back_populates="location")
