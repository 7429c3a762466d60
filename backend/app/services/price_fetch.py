"""Fetch daily closes for symbols the session has not priced yet."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Mapping

import httpx

from app.core.telemetry import PriceFetchTelemetry
from app.providers.alpha_vantage import AlphaVantageClient, AlphaVantageError
from app.services.price_cache import CachedSeries, PriceCacheStore
from equity_tracker.errors import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

Closes = Dict[date, float]
Prices = Dict[str, Closes]

SERIES_KEY = "Time Series (Daily)"
CLOSE_KEY = "4. close"


def parse_daily_closes(payload: Mapping[str, Any]) -> Closes:
    """Return ``{date: close}`` from a daily time-series payload.

    A payload without the series key means no data for the symbol.
    """

    series = payload.get(SERIES_KEY) or {}
    closes: Closes = {}
    for day_str, values in series.items():
        try:
            day = datetime.strptime(day_str, "%Y-%m-%d").date()
            closes[day] = float(values[CLOSE_KEY])
        except (KeyError, TypeError, ValueError):
            continue
    return closes


def from_cached(cached: Mapping[str, Mapping[str, float]]) -> Prices:
    """Convert the cache's string-dated mapping to domain dates."""

    prices: Prices = {}
    for symbol, closes in cached.items():
        parsed: Closes = {}
        for day_str, close in (closes or {}).items():
            try:
                parsed[date.fromisoformat(day_str)] = float(close)
            except (TypeError, ValueError):
                logger.warning("Skipping cached close %r=%r for %s", day_str, close, symbol)
        prices[symbol] = parsed
    return prices


def to_cached(prices: Mapping[str, Mapping[date, float]]) -> CachedSeries:
    return {
        symbol: {day.isoformat(): close for day, close in sorted(closes.items())}
        for symbol, closes in prices.items()
    }


class PriceFetchCoordinator:
    """Fan out price lookups with bounded concurrency and a per-call timeout.

    A symbol that already has an entry, even an empty one, is never fetched
    again; failed lookups are recorded as empty series. The timeout covers
    the HTTP round trip, not the client's rate-limit queue.
    """

    def __init__(
        self,
        client: AlphaVantageClient,
        *,
        max_concurrency: int = 2,
        timeout_seconds: float = 30.0,
        output_size: str = "full",
        telemetry: PriceFetchTelemetry | None = None,
    ) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._timeout = timeout_seconds
        self._output_size = output_size
        self.telemetry = telemetry or PriceFetchTelemetry()

    @staticmethod
    def missing_symbols(symbols: Iterable[str], known: Mapping[str, Any]) -> list[str]:
        processed = set(known)
        missing = []
        for symbol in symbols:
            if symbol in processed:
                continue
            processed.add(symbol)
            missing.append(symbol)
        return missing

    async def _lookup(self, symbol: str) -> tuple[Closes, str]:
        async with self._semaphore:
            try:
                payload = await self._client.daily_adjusted(
                    symbol,
                    output=self._output_size,
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("Price fetch for %s timed out after %.1fs", symbol, self._timeout)
                return {}, "timeout"
            except (AlphaVantageError, httpx.HTTPError, ValueError) as exc:
                logger.warning("Price fetch for %s failed: %s", symbol, exc)
                return {}, "error"
        closes = parse_daily_closes(payload)
        if not closes:
            logger.info("No daily series returned for %s", symbol)
            return closes, "empty"
        return closes, "ok"

    async def _fetch_one(self, symbol: str) -> Closes:
        started = time.monotonic()
        closes, outcome = await self._lookup(symbol)
        self.telemetry.record_fetch(symbol, outcome, time.monotonic() - started)
        return closes

    async def fetch_missing(self, symbols: Iterable[str], known: Mapping[str, Closes]) -> Prices:
        """Return ``known`` extended with one entry per symbol it lacks."""

        missing = self.missing_symbols(symbols, known)
        merged: Prices = {symbol: dict(closes) for symbol, closes in known.items()}
        if not missing:
            return merged
        logger.info("Fetching daily closes for %d symbols: %s", len(missing), ", ".join(missing))
        results = await asyncio.gather(*(self._fetch_one(symbol) for symbol in missing))
        merged.update(zip(missing, results))
        return merged


def _is_stale(closes: Closes, today: date, max_age_days: int) -> bool:
    if not closes:
        return True
    return today - max(closes) > timedelta(days=max_age_days)


def load_cached_prices(store: PriceCacheStore) -> Prices:
    """Read the cache, treating an unreadable file as empty."""

    try:
        return from_cached(store.fetch_all())
    except StoreReadError as exc:
        logger.warning("Ignoring unreadable price cache: %s", exc)
        return {}


def split_stale(
    cached: Prices,
    max_age_days: int | None,
    today: date | None = None,
) -> tuple[Prices, Prices]:
    """Return ``(fresh, stale)`` cached series; nothing is stale without a max age."""

    if max_age_days is None:
        return cached, {}
    today = today or date.today()
    fresh: Prices = {}
    stale: Prices = {}
    for symbol, closes in cached.items():
        target = stale if _is_stale(closes, today, max_age_days) else fresh
        target[symbol] = closes
    return fresh, stale


async def refresh_portfolio_prices(
    symbols: Iterable[str],
    store: PriceCacheStore,
    coordinator: PriceFetchCoordinator,
    *,
    max_age_days: int | None = None,
    today: date | None = None,
) -> Prices:
    """Merge cached closes, fetch what is missing and write new series back.

    Stale series are fetched again; if that fetch comes back empty the stale
    closes are kept rather than discarded.
    """

    symbols = list(symbols)
    attributes = {"portfolio.symbols": len(symbols)}
    with coordinator.telemetry.span("refresh_portfolio_prices", attributes) as span:
        known, stale = split_stale(load_cached_prices(store), max_age_days, today)
        if stale:
            logger.info("Refreshing %d stale cached series", len(stale))
        prices = await coordinator.fetch_missing(symbols, known)
        for symbol, closes in stale.items():
            if not prices.get(symbol):
                prices[symbol] = closes
        fetched = {
            symbol: closes
            for symbol, closes in prices.items()
            if symbol not in known and closes and closes is not stale.get(symbol)
        }
        span.set_attribute("price_cache.stale", len(stale))
        span.set_attribute("price_cache.persisted", len(fetched))
        if fetched:
            try:
                store.merge(to_cached(fetched))
            except StoreWriteError as exc:
                logger.error("Could not persist fetched prices: %s", exc)
    return prices


__all__ = [
    "PriceFetchCoordinator",
    "from_cached",
    "load_cached_prices",
    "parse_daily_closes",
    "refresh_portfolio_prices",
    "split_stale",
    "to_cached",
]
