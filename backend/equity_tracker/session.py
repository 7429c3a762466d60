"""Immutable snapshot of one tracker session."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Mapping, Sequence, Tuple

from .models import ChartPoint, Transaction
from .pipeline import DEFAULT_THRESHOLD_PCT, build_equity_series


@dataclass(frozen=True)
class TrackerSession:
    """Transactions, prices and chart data that are replaced, never patched.

    Every event (a new upload, a finished price fetch) produces a new session
    whose chart is rebuilt from scratch.
    """

    transactions: Tuple[Transaction, ...] = ()
    prices: Mapping[str, Mapping[date, float]] = field(default_factory=dict)
    chart: Tuple[ChartPoint, ...] = ()
    threshold_pct: float = DEFAULT_THRESHOLD_PCT

    @classmethod
    def empty(cls, threshold_pct: float = DEFAULT_THRESHOLD_PCT) -> "TrackerSession":
        return cls(threshold_pct=threshold_pct)

    def with_transactions(self, transactions: Sequence[Transaction]) -> "TrackerSession":
        txs = tuple(transactions)
        return replace(self, transactions=txs, chart=self._rebuild(txs, self.prices))

    def with_prices(self, prices: Mapping[str, Mapping[date, float]]) -> "TrackerSession":
        frozen: Dict[str, Dict[date, float]] = {symbol: dict(closes) for symbol, closes in prices.items()}
        return replace(self, prices=frozen, chart=self._rebuild(self.transactions, frozen))

    def symbols(self) -> list[str]:
        """Return unique tickers in the order they first appear."""

        return list(dict.fromkeys(tx.ticker for tx in self.transactions))

    def _rebuild(self, transactions, prices) -> Tuple[ChartPoint, ...]:
        return tuple(build_equity_series(transactions, prices, threshold_pct=self.threshold_pct))


__all__ = ["TrackerSession"]
