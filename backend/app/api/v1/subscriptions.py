"""Subscription API endpoints for the signed-in Telegram user."""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.dependencies.auth import TelegramUser, require_telegram_user
from app.models.base import get_db
from app.models.job_category import JobCategory
from app.models.location import Location
from app.models.subscriber import Subscriber
from app.models.subscription import Subscription, SubscriptionLocation
from app.schemas.catalog import CategoryRead, LocationRead
from app.schemas.common import ApiResponse
from app.schemas.subscription import SubscriptionRead, SubscriptionsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


async def _load_subscriber(db: AsyncSession, telegram_id: int) -> Subscriber | None:
    result = await db.execute(
        select(Subscriber)
        .where(Subscriber.telegram_id == telegram_id)
        .options(
            selectinload(Subscriber.subscriptions).selectinload(Subscription.category),
            selectinload(Subscriber.subscriptions)
            .selectinload(Subscription.locations)
            .selectinload(SubscriptionLocation.location),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _serialize(subscriber: Subscriber) -> list[SubscriptionRead]:
    subscriptions = sorted(subscriber.subscriptions, key=lambda s: s.category.name)
    return [
        SubscriptionRead(
            category_id=sub.category_id,
            category=CategoryRead.model_validate(sub.category),
            locations=sorted(
                (LocationRead.model_validate(link.location) for link in sub.locations),
                key=lambda loc: loc.name,
            ),
        )
        for sub in subscriptions
    ]


@router.get("", response_model=ApiResponse[list[SubscriptionRead]])
async def get_subscriptions(
    user: TelegramUser = Depends(require_telegram_user),
    db: AsyncSession = Depends(get_db),
):
    """Current subscriptions of the signed-in user."""
    subscriber = await _load_subscriber(db, user.id)
    if not subscriber:
        raise HTTPException(status_code=404, detail="Subscriber not found")
    return ApiResponse(data=_serialize(subscriber))


@router.post("", response_model=ApiResponse[list[SubscriptionRead]])
async def replace_subscriptions(
    body: SubscriptionsUpdate,
    user: TelegramUser = Depends(require_telegram_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace the full subscription set of the signed-in user.

    Creates the subscriber on first use. Unknown category or location ids
    reject the whole request.
    """
    # Last entry wins for a repeated category
    wanted: dict[uuid.UUID, set[uuid.UUID]] = {}
    for item in body.subscriptions:
        wanted[item.category_id] = set(item.location_ids)

    category_ids = set(wanted)
    location_ids = set().union(*wanted.values()) if wanted else set()

    if category_ids:
        result = await db.execute(select(JobCategory.id).where(JobCategory.id.in_(category_ids)))
        if set(result.scalars().all()) != category_ids:
            raise HTTPException(status_code=400, detail="Unknown category")
    if location_ids:
        result = await db.execute(select(Location.id).where(Location.id.in_(location_ids)))
        if set(result.scalars().all()) != location_ids:
            raise HTTPException(status_code=400, detail="Unknown location")

    subscriber = await _load_subscriber(db, user.id)
    if subscriber is None:
        subscriber = Subscriber(id=uuid.uuid4(), telegram_id=user.id, subscriptions=[])
        db.add(subscriber)
        logger.info(f"Created subscriber {user.id} from web app")

    subscriber.username = user.username
    subscriber.first_name = user.first_name
    subscriber.last_name = user.last_name
    subscriber.language_code = user.language_code
    subscriber.last_seen_at = datetime.now(timezone.utc)

    subscriber.subscriptions.clear()
    await db.flush()

    for category_id, locs in wanted.items():
        subscription = Subscription(id=uuid.uuid4(), subscriber_id=subscriber.id, category_id=category_id)
        subscription.locations = [
            SubscriptionLocation(id=uuid.uuid4(), location_id=location_id) for location_id in locs
        ]
        db.add(subscription)
    await db.commit()

    logger.info(f"Subscriber {user.id} now has {len(wanted)} subscriptions")
    subscriber = await _load_subscriber(db, user.id)
    return ApiResponse(data=_serialize(subscriber))
