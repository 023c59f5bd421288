"""Webhook command handling.

Replies are returned as Bot API method payloads so Telegram executes them
from the webhook response, no outbound call needed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.bot.keyboards import settings_keyboard
from app.bot.telegram import send_message_payload
from app.models.subscriber import Subscriber

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "👋 Welcome to <b>DOU Jobs</b>!\n\n"
    "I will send you new vacancies from jobs.dou.ua that match your subscriptions.\n"
    "Pick categories and cities with the button below."
)
SETTINGS_TEXT = "Manage your subscriptions:"
HELP_TEXT = (
    "Available commands:\n"
    "/start - subscribe and open the settings\n"
    "/settings - manage subscriptions"
)
ERROR_TEXT = "An error occurred. Please try again later."


def reply(chat_id: int, text: str, reply_markup: dict | None = None) -> dict[str, Any]:
    return {"method": "sendMessage", **send_message_payload(chat_id, text, reply_markup)}


def parse_command(text: str) -> str | None:
    """'/start@DouBot payload' -> '/start'. None for plain text."""
    if not text.startswith("/"):
        return None
    return text.split()[0].split("@")[0].lower()


async def upsert_subscriber(db: AsyncSession, sender: dict) -> Subscriber:
    result = await db.execute(select(Subscriber).where(Subscriber.telegram_id == sender["id"]))
    subscriber = result.scalar_one_or_none()
    if subscriber is None:
        subscriber = Subscriber(id=uuid.uuid4(), telegram_id=sender["id"])
        db.add(subscriber)
        logger.info(f"New subscriber {sender['id']}")

    subscriber.username = sender.get("username")
    subscriber.first_name = sender.get("first_name")
    subscriber.last_name = sender.get("last_name")
    subscriber.language_code = sender.get("language_code")
    subscriber.is_bot = bool(sender.get("is_bot", False))
    subscriber.last_seen_at = datetime.now(timezone.utc)
    await db.commit()
    return subscriber


async def handle_update(update: dict, db: AsyncSession, webapp_url: str) -> dict[str, Any] | None:
    """Return the reply for an update, or None when there is nothing to say."""
    message = update.get("message") or {}
    chat_id = (message.get("chat") or {}).get("id")
    sender = message.get("from")
    command = parse_command(message.get("text") or "")
    if chat_id is None or command is None:
        return None

    try:
        if command == "/start":
            if sender:
                await upsert_subscriber(db, sender)
            return reply(chat_id, WELCOME_TEXT, settings_keyboard(webapp_url))
        if command == "/settings":
            return reply(chat_id, SETTINGS_TEXT, settings_keyboard(webapp_url))
        return reply(chat_id, HELP_TEXT)
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to handle {command} from chat {chat_id}: {e}")
        return reply(chat_id, ERROR_TEXT)
