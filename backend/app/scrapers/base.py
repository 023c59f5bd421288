"""Shared HTTP plumbing for everything that reads the source site."""

import logging

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A document could not be retrieved (or decoded) from the source site."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status_code = status_code


def build_http_client(settings: Settings) -> httpx.Client:
    """Create the client used for feed and page requests.

    The language cookie keeps the markup in English so the structural
    selectors stay valid.
    """
    return httpx.Client(
        timeout=settings.http_timeout,
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept-Language": settings.accept_language,
            "Cookie": settings.language_cookie,
        },
    )


def fetch(client: httpx.Client, url: str, accept: str | None = None) -> httpx.Response:
    """GET a URL, converting every transport failure into FetchError."""
    headers = {"Accept": accept} if accept else None
    try:
        resp = client.get(url, headers=headers)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}", status_code=e.response.status_code) from e
    except httpx.HTTPError as e:
        raise FetchError(url, f"{type(e).__name__}: {e}") from e
    return resp
