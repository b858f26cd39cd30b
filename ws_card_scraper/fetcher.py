"""HTTP page fetcher with linear-backoff retry."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from ws_card_scraper.config import FetchConfig
from ws_card_scraper.models import FetchError, PageNotFoundError

logger = logging.getLogger(__name__)

USER_AGENT = "WsCardScraper/0.1"


class Fetcher:
    """Fetches page bodies one at a time, retrying failed requests.

    A request fails on any transport error or a status other than 200.
    The wait before retry *k* is ``initial_delay + (k - 1) * delay_step``
    seconds; after ``max_attempts`` attempts FetchError is raised.
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        rate_limit_ms: int = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or FetchConfig()
        self._rate_limit = rate_limit_ms / 1000.0
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    async def _throttle(self) -> None:
        if self._rate_limit > 0:
            await self._sleep(self._rate_limit)

    def retry_delay(self, retry: int) -> float:
        """Seconds to wait before the given retry (1-based)."""
        return self._config.initial_delay + (retry - 1) * self._config.delay_step

    async def fetch(self, url: str, not_found_ok: bool = False) -> str:
        """Return the body of ``url``, retrying until it succeeds or attempts run out.

        With ``not_found_ok`` a 404 is final: PageNotFoundError is raised
        at once instead of retrying.
        """
        max_attempts = self._config.max_attempts
        status_code: Optional[int] = None
        error: Optional[str] = None

        for attempt in range(1, max_attempts + 1):
            retry = attempt - 1
            logger.info("Fetching %s (retry %d)", url, retry)
            await self._throttle()
            try:
                resp = await self._get_client().get(url)
            except httpx.HTTPError as exc:
                status_code, error = None, str(exc) or type(exc).__name__
            else:
                if resp.status_code == 200:
                    return resp.text
                if not_found_ok and resp.status_code == 404:
                    raise PageNotFoundError(url, attempt)
                status_code, error = resp.status_code, None

            if attempt == max_attempts:
                break
            delay = self.retry_delay(attempt)
            logger.warning(
                "Fetch of %s failed (%s); retry %d/%d in %.1fs",
                url,
                error or f"status {status_code}",
                attempt,
                max_attempts - 1,
                delay,
            )
            await self._sleep(delay)

        raise FetchError(url, max_attempts, status_code=status_code, error=error)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
