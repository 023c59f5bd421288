"""Telegram Mini App authentication for API routes.

The web app forwards ``Telegram.WebApp.initData`` in the
``X-Telegram-Init-Data`` header. It is a query string signed by Telegram:

    secret = HMAC_SHA256(key="WebAppData", msg=<bot token>)
    hash   = hex(HMAC_SHA256(key=secret, msg=<data-check-string>))

where the data-check-string is every ``key=value`` pair except ``hash``,
sorted by key and joined with newlines.
"""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl

from fastapi import Depends, Header, HTTPException

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class TelegramUser:
    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    language_code: str | None = None


def data_check_string(pairs: dict[str, str]) -> str:
    return "\n".join(f"{key}={pairs[key]}" for key in sorted(pairs) if key != "hash")


def sign_init_data(pairs: dict[str, str], bot_token: str) -> str:
    secret = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    return hmac.new(secret, data_check_string(pairs).encode(), hashlib.sha256).hexdigest()


def validate_init_data(init_data: str, bot_token: str) -> bool:
    if not init_data or not bot_token:
        return False
    pairs = dict(parse_qsl(init_data, keep_blank_values=True))
    received = pairs.get("hash")
    if not received:
        return False
    return hmac.compare_digest(sign_init_data(pairs, bot_token), received)


def parse_init_data_user(init_data: str) -> TelegramUser | None:
    raw = dict(parse_qsl(init_data, keep_blank_values=True)).get("user")
    if not raw:
        return None
    try:
        user = json.loads(raw)
        return TelegramUser(
            id=int(user["id"]),
            first_name=user.get("first_name"),
            last_name=user.get("last_name"),
            username=user.get("username"),
            language_code=user.get("language_code"),
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"Unable to parse user from initData: {e}")
        return None


async def require_telegram_user(
    x_telegram_init_data: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> TelegramUser:
    """Return the signed-in Telegram user or raise 401."""
    if not x_telegram_init_data:
        logger.warning("Missing x-telegram-init-data header")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not validate_init_data(x_telegram_init_data, settings.telegram_bot_token):
        logger.warning("Invalid Telegram initData signature")
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = parse_init_data_user(x_telegram_init_data)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
