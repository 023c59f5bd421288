"""Job posting model — core job table plus its location associations."""

from sqlalchemy import BigInteger, Column, String, DateTime, Text, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class JobPosting(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "job_postings"

    # Source identity; monotonically assigned upstream, doubles as the ingestion watermark
    dou_id = Column(BigInteger, unique=True, nullable=False, index=True)

    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("job_categories.id"), nullable=False, index=True)

    # Core
    title = Column(Text, nullable=False)
    url = Column(Text, nullable=False)  # canonical, query string stripped
    description = Column(Text, nullable=False, default="")  # short rich text from the feed
    full_description = Column(Text, nullable=False, default="")  # detail page HTML
    salary = Column(String(255))
    published_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships (import strings to avoid circular imports)
    company = relationship("Company", back_populates="job_postings")
    category = relationship("JobCategory", back_populates="job_postings")
    locations = relationship(
        "JobLocation",
        back_populates="job_posting",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_job_category_published", "category_id", "published_at"),
    )

    @property
    def location_ids(self) -> set:
        return {link.location_id for link in self.locations}


class JobLocation(UUIDMixin, Base):
    __tablename__ = "job_locations"

    job_posting_id = Column(
        Uuid(as_uuid=True), ForeignKey("job_postings.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    location_id = Column(Uuid(as_uuid=True), ForeignKey("locations.id"), nullable=False, index=True)

    job_posting = relationship("JobPosting", back_populates="locations")
    location = relationship("Location", back_populates="job_locations")

    __table_args__ = (
        UniqueConstraint("job_posting_id", "location_id", name="uq_job_locations_job_location"),
    )
