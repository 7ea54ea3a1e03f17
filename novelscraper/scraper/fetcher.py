"""Document loading over a shared, per-run HTTP context.

A :class:`FetchContext` owns one ``httpx.AsyncClient`` and the semaphore that
caps concurrent chapter fetches.  Build one per processing run::

    async with FetchContext() as ctx:
        doc = await load_document(ctx, "https://novelfull.com/some-novel.html")
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Optional

import httpx

from novelscraper.config import settings
from novelscraper.errors import FetchError, FetchExhaustedError
from novelscraper.scraper.models import Document

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = 503


def _ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


async def _wait(seconds: float) -> None:
    await asyncio.sleep(seconds)


class FetchContext:
    """HTTP client, concurrency cap and retry policy for one processing run.

    Every argument defaults to the matching field on ``settings``.  Passing an
    explicit ``client`` lets tests inject a transport; the context then leaves
    closing it to the caller.
    """

    def __init__(
        self,
        max_concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.max_concurrency = max_concurrency or settings.max_concurrent_fetches
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.max_attempts = max_attempts or settings.fetch_max_attempts
        self.retry_delay = retry_delay if retry_delay is not None else settings.fetch_retry_delay
        self.user_agent = user_agent or settings.user_agent
        self.semaphore = asyncio.Semaphore(self.max_concurrency)
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                follow_redirects=True,
                verify=_ssl_context(),
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FetchContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def load_document(ctx: FetchContext, uri: str) -> Document:
    """Fetch *uri* and parse it into a :class:`Document`.

    A 503 response is retried up to ``ctx.max_attempts`` attempts in total,
    waiting ``ctx.retry_delay`` seconds between attempts.  Any other error
    status fails immediately.

    Raises:
        FetchError: Non-503 error status, or no response at all.
        FetchExhaustedError: Every attempt answered 503.
    """
    for attempt in range(1, ctx.max_attempts + 1):
        try:
            response = await ctx.client.get(uri)
        except httpx.TransportError as exc:
            raise FetchError(uri, None, str(exc)) from exc

        if response.status_code == _RETRYABLE_STATUS:
            logger.error(
                "Service unavailable while navigating to %s (attempt %d/%d)",
                uri, attempt, ctx.max_attempts,
            )
            if attempt < ctx.max_attempts:
                await _wait(ctx.retry_delay)
            continue

        if response.is_error:
            raise FetchError(uri, response.status_code)

        return Document.parse(str(response.url), response.text, response.status_code)

    raise FetchExhaustedError(uri, ctx.max_attempts)
