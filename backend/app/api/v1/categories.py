"""Category API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_telegram_user
from app.models.base import get_db
from app.models.job_category import JobCategory
from app.schemas.catalog import CategoryRead
from app.schemas.common import ApiResponse

router = APIRouter(prefix="/categories", tags=["categories"], dependencies=[Depends(require_telegram_user)])


@router.get("", response_model=ApiResponse[list[CategoryRead]])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """List active categories."""
    query = (
        select(JobCategory)
        .where(JobCategory.is_active == True)  # noqa: E712
        .order_by(JobCategory.name)
    )
    result = await db.execute(query)
    categories = result.scalars().all()
    return ApiResponse(data=[CategoryRead.model_validate(c) for c in categories])
