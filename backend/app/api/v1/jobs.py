"""Job posting API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.dependencies.auth import require_telegram_user
from app.models.base import get_db
from app.models.job_posting import JobPosting, JobLocation
from app.schemas.catalog import CategoryRead, CompanySummary, LocationRead
from app.schemas.common import ApiResponse
from app.schemas.job_posting import JobPostingRead

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[Depends(require_telegram_user)])


@router.get("/{job_id}", response_model=ApiResponse[JobPostingRead])
async def get_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a single job with company, category and locations."""
    query = (
        select(JobPosting)
        .options(
            selectinload(JobPosting.company),
            selectinload(JobPosting.category),
            selectinload(JobPosting.locations).selectinload(JobLocation.location),
        )
        .where(JobPosting.id == job_id)
    )
    result = await db.execute(query)
    job = result.scalar_one_or_none()

    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    return ApiResponse(data=JobPostingRead(
        id=job.id,
        dou_id=job.dou_id,
        title=job.title,
        url=job.url,
        description=job.description,
        full_description=job.full_description,
        salary=job.salary,
        published_at=job.published_at,
        company=CompanySummary.model_validate(job.company),
        category=CategoryRead.model_validate(job.category),
        locations=[LocationRead.model_validate(link.location) for link in job.locations],
    ))
