"""Pipeline functions for building the portfolio equity time series."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence

from .models import ChartPoint, Transaction

PriceSeries = Mapping[str, Mapping[date, float]]

DEFAULT_THRESHOLD_PCT = 1.0


def _group_by_date(transactions: Iterable[Transaction]) -> Dict[date, List[Transaction]]:
    grouped: Dict[date, List[Transaction]] = {}
    for tx in transactions:
        grouped.setdefault(tx.date, []).append(tx)
    return grouped


def _timeline(transactions: Sequence[Transaction], prices: PriceSeries) -> List[date]:
    dates = {tx.date for tx in transactions}
    for closes in prices.values():
        dates.update(closes.keys())
    return sorted(dates)


def _split_holdings(
    equities: Dict[str, float],
    total_equity: float,
    threshold_pct: float,
) -> tuple[Dict[str, float], float | None]:
    """Split equities into main holdings and the summed Others bucket."""

    threshold = threshold_pct / 100
    ranked = sorted(equities.items(), key=lambda item: item[1], reverse=True)
    main: Dict[str, float] = {}
    others = 0.0
    has_others = False
    for symbol, equity in ranked:
        if equity / total_equity >= threshold:
            main[symbol] = equity
        else:
            others += equity
            has_others = True
    if not has_others or others == 0:
        return main, None
    return main, others


def build_equity_series(
    transactions: Sequence[Transaction],
    prices: PriceSeries,
    *,
    threshold_pct: float = DEFAULT_THRESHOLD_PCT,
) -> List[ChartPoint]:
    """Replay trades day by day and value open positions for charting.

    Each position is priced at the close for that exact date when one is
    known, otherwise at the most recent trade price for the symbol on or
    before the date, otherwise at zero.
    """

    if not transactions:
        return []

    ordered = sorted(transactions, key=lambda tx: tx.date)
    by_date = _group_by_date(ordered)
    positions: Dict[str, float] = {}
    last_trade_price: Dict[str, float] = {}
    points: List[ChartPoint] = []

    for current_date in _timeline(ordered, prices):
        for tx in by_date.get(current_date, []):
            positions[tx.ticker] = positions.get(tx.ticker, 0.0) + tx.signed_quantity
            last_trade_price[tx.ticker] = tx.price

        equities: Dict[str, float] = {}
        total_equity = 0.0
        for symbol, shares in positions.items():
            if shares == 0:
                continue
            price = prices.get(symbol, {}).get(current_date)
            if not price:
                price = last_trade_price.get(symbol, 0.0)
            equity = shares * price
            equities[symbol] = equity
            total_equity += equity

        if total_equity > 0:
            holdings, others = _split_holdings(equities, total_equity, threshold_pct)
            points.append(ChartPoint(current_date, total_equity, holdings, others))
        else:
            points.append(ChartPoint(current_date, total_equity))

    return points


def positions_on(transactions: Sequence[Transaction], as_of: date) -> Dict[str, float]:
    """Return the signed share count per symbol after trades up to ``as_of``."""

    positions: Dict[str, float] = {}
    for tx in sorted(transactions, key=lambda tx: tx.date):
        if tx.date > as_of:
            break
        positions[tx.ticker] = positions.get(tx.ticker, 0.0) + tx.signed_quantity
    return positions


__all__ = ["DEFAULT_THRESHOLD_PCT", "PriceSeries", "build_equity_series", "positions_on"]
