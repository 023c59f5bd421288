"""Pydantic schemas for JobPosting model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.catalog import CategoryRead, CompanySummary, LocationRead


class JobPostingRead(BaseModel):
    """Job detail with company, category and flattened locations."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dou_id: int
    title: str
    url: str
    description: str
    full_description: str
    salary: str | None = None
    published_at: datetime
    company: CompanySummary
    category: CategoryRead
    locations: list[LocationRead] = []
