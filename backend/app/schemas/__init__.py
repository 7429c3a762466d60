"""Pydantic schema exports."""

from .cache import CacheWriteResponse, PriceCachePayload
from .equity import ChartSeriesSchema, EquitySeriesResponse, TransactionSchema

__all__ = [
    "CacheWriteResponse",
    "PriceCachePayload",
    "ChartSeriesSchema",
    "EquitySeriesResponse",
    "TransactionSchema",
]
