"""Minimal Telegram Bot API client over httpx."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class TelegramError(Exception):
    """A Bot API call failed (transport error or ``ok: false``)."""

    def __init__(self, method: str, description: str, error_code: int | None = None):
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramClient:

    def __init__(self, http: httpx.Client, token: str, api_url: str = "https://api.telegram.org"):
        self.http = http
        self.base_url = f"{api_url.rstrip('/')}/bot{token}"

    def call(self, method: str, payload: dict[str, Any]) -> Any:
        try:
            resp = self.http.post(f"{self.base_url}/{method}", json=payload)
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TelegramError(method, f"{type(e).__name__}: {e}") from e

        if not body.get("ok"):
            raise TelegramError(method, body.get("description", "unknown error"), body.get("error_code"))
        return body.get("result")

    def send_message(self, chat_id: int, text: str, reply_markup: dict | None = None) -> Any:
        payload = send_message_payload(chat_id, text, reply_markup)
        return self.call("sendMessage", payload)


def send_message_payload(chat_id: int, text: str, reply_markup: dict | None = None) -> dict[str, Any]:
    """sendMessage parameters: HTML parse mode, link previews off."""
    payload: dict[str, Any] = {
        "chat_id": chat_id,
        "text": text,
        "parse_mode": "HTML",
        "link_preview_options": {"is_disabled": True},
    }
    if reply_markup is not None:
        payload["reply_markup"] = reply_markup
    return payload
