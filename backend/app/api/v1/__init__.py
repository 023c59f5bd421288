"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.categories import router as categories_router
from app.api.v1.locations import router as locations_router
from app.api.v1.subscriptions import router as subscriptions_router
from app.api.v1.jobs import router as jobs_router
from app.api.v1.runs import router as runs_router

router = APIRouter(prefix="/api/v1")

router.include_router(categories_router)
router.include_router(locations_router)
router.include_router(subscriptions_router)
router.include_router(jobs_router)
router.include_router(runs_router)
