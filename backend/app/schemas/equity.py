"""Pydantic schemas for transaction and equity series responses."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class TransactionSchema(BaseModel):
    date: date
    ticker: str
    order: str = Field(..., pattern="^(Buy|Sell)$")
    quantity: float
    price: float
    amount: float


class ChartSeriesSchema(BaseModel):
    key: str = Field(..., examples=["AAPL_equity"])
    name: str
    equity: float
    percentage: float
    label: str = Field(..., examples=["AAPL (62.5%)"])


class EquitySeriesResponse(BaseModel):
    symbols: list[str]
    transactions: list[TransactionSchema]
    points: list[dict[str, float | str]] = Field(
        ...,
        description="Chart rows: date, totalEquity and one <symbol>_equity field per main holding.",
    )
    series: list[ChartSeriesSchema]
    positions: dict[str, float]

    class Config:
        json_schema_extra = {
            "example": {
                "symbols": ["AAPL"],
                "transactions": [
                    {
                        "date": "2024-01-01",
                        "ticker": "AAPL",
                        "order": "Buy",
                        "quantity": 10,
                        "price": 150.0,
                        "amount": 1500.0,
                    }
                ],
                "points": [{"date": "2024-01-01", "totalEquity": 1500.0, "AAPL_equity": 1500.0}],
                "series": [
                    {
                        "key": "AAPL_equity",
                        "name": "AAPL",
                        "equity": 1500.0,
                        "percentage": 100.0,
                        "label": "AAPL (100.0%)",
                    }
                ],
                "positions": {"AAPL": 10},
            }
        }


__all__ = ["ChartSeriesSchema", "EquitySeriesResponse", "TransactionSchema"]
