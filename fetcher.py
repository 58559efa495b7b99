# fetcher.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from config import FetchConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRIABLE_STATUS_CODES = {408, 425, 429}


def is_retriable(exc: BaseException) -> bool:
    """Permanent client errors (404, 401, ...) are not worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status in RETRIABLE_STATUS_CODES
    return True


class RetryingFetcher:
    """GET against the catalog API with bounded retries and exponential backoff."""

    def __init__(
        self,
        config: FetchConfig,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self._sleep = sleep
        if client is None:
            headers = {"accept": "application/json"}
            if config.credential:
                headers["Authorization"] = f"Bearer {config.credential}"
            client = httpx.AsyncClient(
                headers=headers,
                timeout=config.timeout_ms / 1000,
                transport=transport,
            )
        self.client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def backoff_delay_ms(self, attempt_index: int) -> float:
        return self.config.initial_backoff_ms * self.config.backoff_multiplier ** attempt_index

    async def call(self, fn: Callable[[], Awaitable[T]], target: str = "") -> T:
        attempts = max(1, self.config.max_retries)
        for attempt in range(attempts):
            try:
                return await fn()
            except Exception as exc:
                if attempt == attempts - 1 or not is_retriable(exc):
                    raise
                delay = self.backoff_delay_ms(attempt)
                logger.warning(
                    "Retry attempt %d after %dms for URL: %s (%s)",
                    attempt + 1, delay, target, exc,
                )
                await self._sleep(delay / 1000)

    async def get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        async def _request() -> httpx.Response:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response

        return await self.call(_request, url)
