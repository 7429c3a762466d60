"""Alpha Vantage client used by the backend service."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, AsyncIterator, Deque, Dict, Optional

import httpx

from app.config import get_settings

BASE_URL = "https://www.alphavantage.co/query"
DAILY_ADJUSTED_FUNCTION = "TIME_SERIES_DAILY_ADJUSTED"

logger = logging.getLogger(__name__)


class AlphaVantageError(RuntimeError):
    """Raised when Alpha Vantage returns an error payload."""


class AlphaVantageClient:
    """Throttled Alpha Vantage client with convenience helpers."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        requests_per_minute: int | None = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.alphavantage_api_key
        self._requests_per_minute = requests_per_minute or settings.alphavantage_requests_per_minute
        self._timeout = timeout
        self._client = client or httpx.AsyncClient()
        self._calls: Deque[float] = deque()
        self._lock = asyncio.Lock()

    async def _throttle(self) -> None:
        async with self._lock:
            now = time.monotonic()
            while self._calls and now - self._calls[0] >= 60:
                self._calls.popleft()
            if len(self._calls) >= self._requests_per_minute:
                wait_for = 60 - (now - self._calls[0])
                logger.debug("Alpha Vantage rate limit reached; sleeping %.1fs", wait_for)
                await asyncio.sleep(wait_for)
                self._calls.popleft()
            self._calls.append(time.monotonic())

    async def _get(self, params: Dict[str, Any], timeout: float | None = None) -> Dict[str, Any]:
        await self._throttle()
        query = {**params, "apikey": self._api_key}
        response = await asyncio.wait_for(
            self._client.get(BASE_URL, params=query, timeout=self._timeout),
            timeout=timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise AlphaVantageError(f"Unexpected payload type: {type(payload).__name__}")
        for key in ("Error Message", "Note", "Information"):
            if key in payload:
                raise AlphaVantageError(str(payload[key]))
        return payload

    async def daily_adjusted(
        self,
        symbol: str,
        output: str = "full",
        *,
        timeout: float | None = None,
    ) -> Dict[str, Any]:
        """Return the raw TIME_SERIES_DAILY_ADJUSTED payload for ``symbol``.

        ``timeout`` bounds the HTTP round trip only; time spent waiting on the
        rate limit is not counted against it.
        """

        return await self._get(
            {
                "function": DAILY_ADJUSTED_FUNCTION,
                "symbol": symbol,
                "outputsize": output,
            },
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


async def get_alpha_vantage_client() -> AsyncIterator[AlphaVantageClient]:
    """FastAPI dependency yielding a client configured from settings."""

    client = AlphaVantageClient()
    try:
        yield client
    finally:
        await client.aclose()


__all__ = [
    "AlphaVantageClient",
    "AlphaVantageError",
    "BASE_URL",
    "get_alpha_vantage_client",
]
