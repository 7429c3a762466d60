"""Domain models used by the equity tracker pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

NORMALIZED_COLUMNS = ("Date", "Stock Ticker", "Order", "Quantity", "Price", "Amount")
ORDER_TYPES = ("Buy", "Sell")
OTHERS_KEY = "Others"
EQUITY_SUFFIX = "_equity"


@dataclass(frozen=True)
class NormalizedRow:
    """One Buy/Sell row of the simplified export, kept as strings."""

    date: str
    ticker: str
    order: str
    quantity: str
    price: str
    amount: str

    def as_csv_row(self) -> Dict[str, str]:
        """Return the row keyed by the normalized CSV column names."""

        values = (self.date, self.ticker, self.order, self.quantity, self.price, self.amount)
        return dict(zip(NORMALIZED_COLUMNS, values))


@dataclass(frozen=True)
class Transaction:
    """A parsed trade from the normalized CSV."""

    date: date
    ticker: str
    order: str
    quantity: float
    price: float
    amount: float

    @property
    def signed_quantity(self) -> float:
        """Return the share delta applied to the running position."""

        return self.quantity if self.order == "Buy" else -self.quantity

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "ticker": self.ticker,
            "order": self.order,
            "quantity": self.quantity,
            "price": self.price,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class ChartPoint:
    """Portfolio equity on a single date, split for a stacked chart."""

    date: date
    total_equity: float
    holdings: Dict[str, float] = field(default_factory=dict)
    others_equity: Optional[float] = None

    def equity_fields(self) -> Dict[str, float]:
        """Return the ``<symbol>_equity`` fields including the Others bucket."""

        fields = {f"{symbol}{EQUITY_SUFFIX}": equity for symbol, equity in self.holdings.items()}
        if self.others_equity is not None:
            fields[f"{OTHERS_KEY}{EQUITY_SUFFIX}"] = self.others_equity
        return fields

    def as_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"date": self.date.isoformat(), "totalEquity": self.total_equity}
        record.update(self.equity_fields())
        return record
