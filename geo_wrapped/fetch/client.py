"""
HTTP access to the GeoGuessr private activity feed.

The feed is cursor paginated: the first request carries no cursor and every
response returns the `paginationToken` for the next one. Requests are
authenticated with the `_ncfa` session cookie of a logged-in browser session.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from ..core.types import FeedPage
from ..input.feed_parser import parse_feed_page

FEED_PATH = "/api/v4/feed/private"
SESSION_COOKIE_NAME = "_ncfa"


class FeedFetchError(Exception):
    """Raised when a feed page cannot be fetched.

    Attributes:
        status_code: HTTP status of the failed response, or None when the
            request failed before a response arrived
        url: The requested URL
    """

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class FeedClient:
    """Async client for the private feed endpoint.

    Use as an async context manager so the underlying connection pool is
    closed once the run finishes:

        async with FeedClient(base_url, session_cookie=cookie) as client:
            page = await client.fetch_page()
    """

    def __init__(
        self,
        base_url: str,
        session_cookie: str | None = None,
        timeout: float = 20.0,
        trust_env: bool = True,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if user_agent:
            headers["User-Agent"] = user_agent
        cookies = {SESSION_COOKIE_NAME: session_cookie} if session_cookie else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            cookies=cookies,
            timeout=timeout,
            trust_env=trust_env,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> FeedClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_page(self, cursor: str | None = None) -> FeedPage:
        """Fetch one feed page.

        Args:
            cursor: Continuation token from the previous page, None for the
                newest page

        Returns:
            The parsed FeedPage

        Raises:
            FeedFetchError: On a non-success status, a transport failure or a
                body that is not a feed page
        """
        params = {"paginationToken": cursor} if cursor else None
        url = f"{self.base_url}{FEED_PATH}"

        try:
            resp = await self._client.get(FEED_PATH, params=params)
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"{type(exc).__name__}: {exc}", url=url) from exc

        if not resp.is_success:
            raise FeedFetchError(
                f"HTTP error! status: {resp.status_code}",
                status_code=resp.status_code,
                url=url,
            )

        try:
            return parse_feed_page(resp.json())
        except (json.JSONDecodeError, ValueError) as exc:
            raise FeedFetchError(
                f"Invalid feed response: {exc}",
                status_code=resp.status_code,
                url=url,
            ) from exc
