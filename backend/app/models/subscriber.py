"""Subscriber model — a Telegram user who can receive job notifications."""

from sqlalchemy import BigInteger, Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class Subscriber(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "subscribers"

    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String(255))
    first_name = Column(String(255))
    last_name = Column(String(255))
    language_code = Column(String(16))
    is_bot = Column(Boolean, default=False, nullable=False)
    last_seen_at = Column(DateTime(timezone=True))

    # Everything published at or before this instant has already been sent
    last_notified_at = Column(DateTime(timezone=True))

    # Relationships
    subscriptions = relationship("Subscription", back_populates="subscriber", cascade="all, delete-orphan")
