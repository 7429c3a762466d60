"""Equity series builder tests."""

from __future__ import annotations

from datetime import date

import pytest

from equity_tracker import Transaction, build_equity_series
from equity_tracker.pipeline import positions_on


def _tx(day: date, ticker: str, order: str, quantity: float, price: float) -> Transaction:
    return Transaction(date=day, ticker=ticker, order=order, quantity=quantity, price=price, amount=quantity * price)


def _by_date(points):
    return {point.date: point for point in points}


def _assert_parts_sum_to_total(points):
    for point in points:
        if point.total_equity > 0:
            parts = sum(point.equity_fields().values())
            assert parts == pytest.approx(point.total_equity, rel=1e-6)


def test_sell_reduces_position_on_and_after_trade_date():
    transactions = [
        _tx(date(2024, 1, 5), "PATH", "Sell", 4, 110),
        _tx(date(2024, 1, 1), "PATH", "Buy", 10, 100),
    ]
    prices = {"PATH": {date(2024, 1, 3): 105.0, date(2024, 1, 8): 120.0}}
    points = _by_date(build_equity_series(transactions, prices))

    assert list(points) == [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 5), date(2024, 1, 8)]
    assert points[date(2024, 1, 3)].total_equity == pytest.approx(10 * 105)
    # no close on the sell date: last trade price is used
    assert points[date(2024, 1, 5)].total_equity == pytest.approx(6 * 110)
    assert points[date(2024, 1, 8)].holdings["PATH"] == pytest.approx(6 * 120)
    assert positions_on(transactions, date(2024, 1, 4)) == {"PATH": 10}
    assert positions_on(transactions, date(2024, 1, 5)) == {"PATH": 6}
    assert positions_on(transactions, date(2024, 2, 1)) == {"PATH": 6}


def test_failed_fetch_falls_back_to_transaction_price():
    points = build_equity_series([_tx(date(2024, 1, 1), "AAPL", "Buy", 10, 150)], {"AAPL": {}})
    [point] = points
    assert point.as_record() == {"date": "2024-01-01", "totalEquity": 1500.0, "AAPL_equity": 1500.0}


def test_zero_close_falls_back_to_transaction_price():
    points = build_equity_series(
        [_tx(date(2024, 1, 1), "AAPL", "Buy", 2, 150)],
        {"AAPL": {date(2024, 1, 1): 0.0}},
    )
    assert points[0].total_equity == pytest.approx(300)


def test_symbol_without_trades_or_closes_is_valued_at_zero():
    transactions = [
        _tx(date(2024, 1, 1), "AAPL", "Buy", 1, 100),
        _tx(date(2024, 1, 1), "FREE", "Buy", 5, 0),
    ]
    [point] = build_equity_series(transactions, {})
    assert point.total_equity == pytest.approx(100)
    assert point.holdings == {"AAPL": 100}
    assert point.others_equity is None


def test_exactly_one_percent_is_a_main_holding():
    transactions = [
        _tx(date(2024, 1, 1), "AAPL", "Buy", 99, 1),
        _tx(date(2024, 1, 1), "MSFT", "Buy", 1, 1),
    ]
    [point] = build_equity_series(transactions, {})
    assert point.holdings == {"AAPL": 99, "MSFT": 1}
    assert point.others_equity is None


def test_small_holdings_are_grouped_as_others():
    day = date(2024, 2, 1)
    transactions = [
        _tx(day, "AAPL", "Buy", 10, 100),
        _tx(day, "MSFT", "Buy", 3, 300),
        _tx(day, "PENNY", "Buy", 1, 5),
        _tx(day, "DIME", "Buy", 1, 10),
    ]
    [point] = build_equity_series(transactions, {})
    record = point.as_record()
    assert record["Others_equity"] == pytest.approx(15)
    assert "PENNY_equity" not in record
    assert set(point.holdings) == {"AAPL", "MSFT"}
    _assert_parts_sum_to_total([point])


def test_negative_others_are_kept_so_parts_sum_to_total():
    day = date(2024, 2, 1)
    transactions = [
        _tx(day, "AAPL", "Buy", 100, 10),
        _tx(day, "SHORT", "Sell", 1, 5),
    ]
    [point] = build_equity_series(transactions, {})
    assert point.total_equity == pytest.approx(995)
    assert point.others_equity == pytest.approx(-5)
    _assert_parts_sum_to_total([point])


def test_closed_portfolio_has_no_symbol_fields():
    transactions = [
        _tx(date(2024, 1, 1), "AAPL", "Buy", 5, 100),
        _tx(date(2024, 1, 2), "AAPL", "Sell", 5, 110),
    ]
    points = _by_date(build_equity_series(transactions, {"AAPL": {date(2024, 1, 3): 120.0}}))
    assert points[date(2024, 1, 2)].as_record() == {"date": "2024-01-02", "totalEquity": 0.0}
    assert points[date(2024, 1, 3)].equity_fields() == {}


def test_price_history_extends_the_timeline():
    transactions = [_tx(date(2024, 1, 3), "AAPL", "Buy", 1, 100)]
    prices = {
        "AAPL": {date(2024, 1, 2): 99.0, date(2024, 1, 4): 101.0},
        "MSFT": {date(2024, 1, 1): 370.0},
    }
    points = build_equity_series(transactions, prices)
    assert [p.date for p in points] == [date(2024, 1, d) for d in (1, 2, 3, 4)]
    assert [p.total_equity for p in points] == pytest.approx([0, 0, 100, 101])


def test_parts_sum_to_total_across_a_mixed_history():
    transactions = [
        _tx(date(2024, 1, 1), "AAPL", "Buy", 10, 180),
        _tx(date(2024, 1, 2), "MSFT", "Buy", 5, 370),
        _tx(date(2024, 1, 2), "TINY", "Buy", 1, 2.5),
        _tx(date(2024, 1, 3), "NVDA", "Buy", 0.1, 480),
        _tx(date(2024, 1, 4), "AAPL", "Sell", 3, 185),
        _tx(date(2024, 1, 5), "TINY", "Sell", 1, 3),
    ]
    prices = {
        "AAPL": {date(2024, 1, d): 180.0 + d for d in range(1, 8)},
        "MSFT": {date(2024, 1, d): 370.0 - d for d in range(2, 8)},
        "NVDA": {},
    }
    points = build_equity_series(transactions, prices)
    assert len(points) == 7
    _assert_parts_sum_to_total(points)


def test_custom_threshold():
    transactions = [
        _tx(date(2024, 1, 1), "AAPL", "Buy", 95, 1),
        _tx(date(2024, 1, 1), "MSFT", "Buy", 5, 1),
    ]
    [point] = build_equity_series(transactions, {}, threshold_pct=10)
    assert point.holdings == {"AAPL": 95}
    assert point.others_equity == pytest.approx(5)


def test_no_transactions_yields_no_points():
    assert build_equity_series([], {"AAPL": {date(2024, 1, 1): 1.0}}) == []
