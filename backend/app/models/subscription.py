"""Subscription models — category subscriptions with optional location filters."""

from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class Subscription(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "subscriptions"

    subscriber_id = Column(Uuid(as_uuid=True), ForeignKey("subscribers.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("job_categories.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    subscriber = relationship("Subscriber", back_populates="subscriptions")
    category = relationship("JobCategory", back_populates="subscriptions")
    # Empty means every location in the category
    locations = relationship("SubscriptionLocation", back_populates="subscription", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("subscriber_id", "category_id", name="uq_subscriptions_subscriber_category"),
    )

    @property
    def location_ids(self) -> set:
        return {link.location_id for link in self.locations}


class SubscriptionLocation(UUIDMixin, Base):
    __tablename__ = "subscription_locations"

    subscription_id = Column(
        Uuid(as_uuid=True), ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    location_id = Column(Uuid(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)

    subscription = relationship("Subscription", back_populates="locations")
    location = relationship("Location")

    __table_args__ = (
        UniqueConstraint("subscription_id", "location_id", name="uq_subscription_locations_sub_location"),
    )
