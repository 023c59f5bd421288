"""Pydantic schemas for subscriptions."""

from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.catalog import CategoryRead, LocationRead


class SubscriptionRead(BaseModel):
    category_id: UUID
    category: CategoryRead
    locations: list[LocationRead] = []


class SubscriptionItem(BaseModel):
    category_id: UUID
    location_ids: list[UUID] = Field(default_factory=list, description="Empty means all locations")


class SubscriptionsUpdate(BaseModel):
    subscriptions: list[SubscriptionItem]
