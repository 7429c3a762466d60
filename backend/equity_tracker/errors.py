"""Exceptions raised by the equity tracker pipeline."""

from __future__ import annotations


class EquityTrackerError(RuntimeError):
    """Base class for user-facing pipeline failures."""


class CSVParseError(EquityTrackerError):
    """Raised when uploaded text is not valid delimited data."""


class EmptyResultError(EquityTrackerError):
    """Raised when no qualifying rows survive filtering."""


class CSVValidationError(EquityTrackerError):
    """Raised when a normalized CSV has the wrong columns or bad values."""


class StoreReadError(EquityTrackerError):
    """Raised when the price cache exists but cannot be read."""


class StoreWriteError(EquityTrackerError):
    """Raised when the price cache cannot be written."""


__all__ = [
    "EquityTrackerError",
    "CSVParseError",
    "EmptyResultError",
    "CSVValidationError",
    "StoreReadError",
    "StoreWriteError",
]
