"""Scrape session journal endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_telegram_user
from app.models.base import get_db
from app.models.scrape_session import ScrapeSession
from app.schemas.common import ApiResponse
from app.schemas.scrape_session import ScrapeSessionRead

router = APIRouter(prefix="/runs", tags=["runs"], dependencies=[Depends(require_telegram_user)])


@router.get("", response_model=ApiResponse[list[ScrapeSessionRead]])
async def list_runs(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(20, ge=1, le=100),
    status: str | None = Query(None, description="Filter by status"),
):
    """List recent scrape sessions, newest first."""
    query = select(ScrapeSession)
    if status:
        query = query.where(ScrapeSession.status == status)
    query = query.order_by(ScrapeSession.started_at.desc()).limit(limit)

    result = await db.execute(query)
    return ApiResponse(data=[ScrapeSessionRead.model_validate(run) for run in result.scalars().all()])
