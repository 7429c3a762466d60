"""Pydantic schemas for the price cache endpoint."""

from __future__ import annotations

from pydantic import BaseModel, RootModel


class PriceCachePayload(RootModel[dict[str, dict[str, float]]]):
    """``{symbol: {"YYYY-MM-DD": close}}`` as stored in the cache file."""


class CacheWriteResponse(BaseModel):
    success: bool
    error: str | None = None


__all__ = ["CacheWriteResponse", "PriceCachePayload"]
