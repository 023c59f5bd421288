"""Location API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_telegram_user
from app.models.base import get_db
from app.models.location import Location
from app.schemas.catalog import LocationRead
from app.schemas.common import ApiResponse

router = APIRouter(prefix="/locations", tags=["locations"], dependencies=[Depends(require_telegram_user)])


@router.get("", response_model=ApiResponse[list[LocationRead]])
async def list_locations(db: AsyncSession = Depends(get_db)):
    """List active locations."""
    query = select(Location).where(Location.is_active == True).order_by(Location.name)  # noqa: E712
    result = await db.execute(query)
    return ApiResponse(data=[LocationRead.model_validate(loc) for loc in result.scalars().all()])
