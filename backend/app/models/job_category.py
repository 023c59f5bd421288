"""Job category model — one per source category feed."""

from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class JobCategory(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "job_categories"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    url = Column(String(500))
    rss_url = Column(String(500), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    job_postings = relationship("JobPosting", back_populates="category")
    subscriptions = relationship("Subscription", back_populates="category")

    __table_args__ = (
        Index("idx_category_active_name", "is_active", "name"),
    )
