"""Flat JSON file cache of daily closing prices per symbol."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping

from pydantic import ValidationError

from app.config import get_settings
from app.schemas.cache import PriceCachePayload
from equity_tracker.errors import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

CachedSeries = Dict[str, Dict[str, float]]


class PriceCacheStore:
    """Read and write the whole ``{symbol: {date: close}}`` mapping at once.

    Writes go to a temporary file next to the cache and are moved into place
    with ``os.replace`` so readers never observe a partial file. There is no
    locking; the last writer wins.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def fetch_all(self) -> CachedSeries:
        """Return the persisted mapping, or ``{}`` when nothing is cached yet."""

        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as exc:
            raise StoreReadError(f"Could not read price cache {self.path}: {exc}") from exc
        try:
            return PriceCachePayload.model_validate(payload).root
        except ValidationError as exc:
            raise StoreReadError(f"Price cache {self.path} is not a symbol to series mapping: {exc}") from exc

    def replace_all(self, series: Mapping[str, Mapping[str, float]]) -> None:
        """Overwrite the persisted mapping with ``series``."""

        payload = {symbol: dict(closes) for symbol, closes in series.items()}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise StoreWriteError(f"Could not write price cache {self.path}: {exc}") from exc
        logger.info("Wrote %d symbols to price cache %s", len(payload), self.path)

    def merge(self, series: Mapping[str, Mapping[str, float]]) -> CachedSeries:
        """Overlay ``series`` on the cached symbols and persist the result."""

        try:
            merged = self.fetch_all()
        except StoreReadError:
            logger.warning("Price cache %s unreadable; rewriting it from scratch", self.path)
            merged = {}
        merged.update({symbol: dict(closes) for symbol, closes in series.items()})
        self.replace_all(merged)
        return merged


def get_price_cache() -> PriceCacheStore:
    """FastAPI dependency returning the configured cache store."""

    return PriceCacheStore(get_settings().price_cache_path)


__all__ = ["CachedSeries", "PriceCacheStore", "get_price_cache"]
