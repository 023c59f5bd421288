"""Telegram webhook route."""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.bot.commands import handle_update
from app.config import Settings, get_settings
from app.models.base import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["telegram"])


@router.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    if settings.telegram_webhook_secret and not hmac.compare_digest(
        x_telegram_bot_api_secret_token or "", settings.telegram_webhook_secret,
    ):
        logger.warning("Rejected webhook call with a bad secret token")
        raise HTTPException(status_code=401, detail="Unauthorized")

    update = await request.json()
    response = await handle_update(update, db, settings.webapp_url)
    return response or {"ok": True}
