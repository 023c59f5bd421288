"""Pydantic schemas for ScrapeSession model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ScrapeSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    duration_ms: int | None = None
    total_jobs_processed: int = 0
    total_jobs_added: int = 0
    total_jobs_updated: int = 0
    total_jobs_skipped: int = 0
    total_errors: int = 0
    categories_processed: int = 0
    last_processed_dou_id: int | None = None
    error_details: str | None = None
