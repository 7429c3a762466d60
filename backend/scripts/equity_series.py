"""CLI wrapper for building the equity series from a normalized CSV."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.config import get_settings
from app.core.logging import setup_logging
from app.providers.alpha_vantage import AlphaVantageClient
from app.services.price_cache import PriceCacheStore
from app.services.price_fetch import PriceFetchCoordinator, load_cached_prices, refresh_portfolio_prices
from equity_tracker import TrackerSession, load_transactions
from equity_tracker.errors import EquityTrackerError


async def _run(path: Path, fetch: bool) -> list[dict]:
    settings = get_settings()
    session = TrackerSession.empty(settings.others_threshold_pct).with_transactions(
        load_transactions(path.read_text(encoding="utf-8-sig"))
    )
    store = PriceCacheStore(settings.price_cache_path)
    if fetch:
        client = AlphaVantageClient()
        try:
            coordinator = PriceFetchCoordinator(
                client,
                max_concurrency=settings.price_fetch_concurrency,
                timeout_seconds=settings.price_fetch_timeout_seconds,
                output_size=settings.alphavantage_output_size,
            )
            prices = await refresh_portfolio_prices(
                session.symbols(),
                store,
                coordinator,
                max_age_days=settings.price_cache_max_age_days,
            )
        finally:
            await client.aclose()
    else:
        prices = load_cached_prices(store)
    return [point.as_record() for point in session.with_prices(prices).chart]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the daily portfolio equity series as JSON")
    parser.add_argument("transactions", type=Path, help="Normalized trade CSV")
    parser.add_argument("--no-fetch", action="store_true", help="Use cached closes only")
    args = parser.parse_args(argv)

    setup_logging(stream=sys.stderr)
    try:
        records = asyncio.run(_run(args.transactions, fetch=not args.no_fetch))
    except EquityTrackerError as exc:
        print(exc, file=sys.stderr)
        return 1
    json.dump(records, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
