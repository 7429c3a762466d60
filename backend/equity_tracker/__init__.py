"""Core package for the equity tracker transformation pipeline."""

from .charting import ChartSeries, chart_series
from .errors import (
    CSVParseError,
    CSVValidationError,
    EmptyResultError,
    EquityTrackerError,
    StoreReadError,
    StoreWriteError,
)
from .models import ChartPoint, NormalizedRow, Transaction
from .normalizer import denormalize_headers, normalize_report, normalize_rows
from .pipeline import build_equity_series
from .session import TrackerSession
from .transactions import load_transactions

__all__ = [
    "ChartPoint",
    "ChartSeries",
    "CSVParseError",
    "CSVValidationError",
    "EmptyResultError",
    "EquityTrackerError",
    "NormalizedRow",
    "StoreReadError",
    "StoreWriteError",
    "Transaction",
    "TrackerSession",
    "build_equity_series",
    "chart_series",
    "denormalize_headers",
    "load_transactions",
    "normalize_report",
    "normalize_rows",
]
