"""Scrape session model — journal entry per ingestion run."""

from sqlalchemy import BigInteger, Column, String, Integer, DateTime, Text

from app.models.base import Base, UUIDMixin

STATUS_IN_PROGRESS = "in_progress"
STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


class ScrapeSession(UUIDMixin, Base):
    __tablename__ = "scrape_sessions"

    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default=STATUS_IN_PROGRESS)  # in_progress, success, partial, failed

    total_jobs_processed = Column(Integer, default=0, nullable=False)
    total_jobs_added = Column(Integer, default=0, nullable=False)
    total_jobs_updated = Column(Integer, default=0, nullable=False)
    total_jobs_skipped = Column(Integer, default=0, nullable=False)
    total_errors = Column(Integer, default=0, nullable=False)
    categories_processed = Column(Integer, default=0, nullable=False)
    last_processed_dou_id = Column(BigInteger)
    duration_ms = Column(Integer)
    error_details = Column(Text)
