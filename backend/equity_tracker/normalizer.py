"""Convert a brokerage transaction report into the simplified trade CSV.

The broker export carries every account activity (dividends, transfers, fees,
trades). Only Buy and Sell rows are kept, renamed to the canonical columns and
stripped of currency formatting so the equity pipeline can parse the numbers.
"""

from __future__ import annotations

import csv
import io
import logging
import re

import pandas as pd

from .errors import CSVParseError, EmptyResultError
from .models import NORMALIZED_COLUMNS, ORDER_TYPES, NormalizedRow

logger = logging.getLogger(__name__)

# canonical column -> broker column
SOURCE_COLUMNS = {
    "Date": "Activity Date",
    "Stock Ticker": "Instrument",
    "Order": "Trans Code",
    "Quantity": "Quantity",
    "Price": "Price",
    "Amount": "Amount",
}

_AMOUNT_NOISE = re.compile(r"[()$,]")
_PRICE_NOISE = re.compile(r"[$,]")


def clean_amount(amount: str) -> str:
    if not amount:
        return ""
    return _AMOUNT_NOISE.sub("", amount).strip()


def clean_price(price: str) -> str:
    if not price:
        return ""
    return _PRICE_NOISE.sub("", price).strip()


def _read_report(text: str) -> pd.DataFrame:
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError as exc:
        raise EmptyResultError("No Buy or Sell transactions found in the file") from exc
    except (pd.errors.ParserError, csv.Error, UnicodeDecodeError) as exc:
        raise CSVParseError(f"Error parsing CSV: {exc}") from exc
    # short rows are padded with NaN regardless of keep_default_na
    return frame.fillna("")


def normalize_rows(text: str) -> list[NormalizedRow]:
    """Return the Buy/Sell rows of a broker report in their original order."""

    frame = _read_report(text)
    if SOURCE_COLUMNS["Order"] not in frame.columns:
        raise EmptyResultError("No Buy or Sell transactions found in the file")

    def _field(record: dict[str, str], column: str) -> str:
        return record.get(SOURCE_COLUMNS[column], "") or ""

    rows: list[NormalizedRow] = []
    for record in frame.to_dict(orient="records"):
        if record.get(SOURCE_COLUMNS["Order"]) not in ORDER_TYPES:
            continue
        rows.append(
            NormalizedRow(
                date=_field(record, "Date"),
                ticker=_field(record, "Stock Ticker"),
                order=_field(record, "Order"),
                quantity=_field(record, "Quantity"),
                price=clean_price(_field(record, "Price")),
                amount=clean_amount(_field(record, "Amount")),
            )
        )
    logger.debug("Kept %d of %d report rows", len(rows), len(frame))
    if not rows:
        raise EmptyResultError("No Buy or Sell transactions found in the file")
    return rows


def normalize_report(text: str) -> str:
    """Return the normalized six-column CSV for a raw broker report."""

    rows = normalize_rows(text)
    frame = pd.DataFrame([row.as_csv_row() for row in rows], columns=list(NORMALIZED_COLUMNS))
    return frame.to_csv(index=False, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def denormalize_headers(text: str) -> str:
    """Rename the header of a normalized CSV back to the broker column names."""

    header, sep, body = text.partition("\n")
    renamed = [SOURCE_COLUMNS.get(name.strip(), name.strip()) for name in header.split(",")]
    return ",".join(renamed) + sep + body


__all__ = [
    "SOURCE_COLUMNS",
    "clean_amount",
    "clean_price",
    "denormalize_headers",
    "normalize_report",
    "normalize_rows",
]
