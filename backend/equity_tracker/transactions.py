"""Load normalized trade CSV text into ``Transaction`` values."""

from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime
from typing import Tuple

import pandas as pd

from .errors import CSVParseError, CSVValidationError, EmptyResultError
from .models import NORMALIZED_COLUMNS, ORDER_TYPES, Transaction

INVALID_FORMAT_MESSAGE = (
    "Invalid CSV format.\n"
    "Please ensure your CSV has the columns:\n" + ", ".join(NORMALIZED_COLUMNS)
)

_PRICE_NOISE = re.compile(r"[$,]")
_AMOUNT_NOISE = re.compile(r"[()$,]")


def parse_trade_date(raw: str) -> date:
    """Parse ISO dates as well as the broker's ``M/D/YYYY`` format."""

    value = raw.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.strptime(value, "%m/%d/%Y").date()


def _parse_number(raw: str, noise: re.Pattern[str]) -> float:
    return float(noise.sub("", raw).strip())


def load_transactions(text: str) -> Tuple[Transaction, ...]:
    """Parse and validate a normalized CSV into transactions in file order."""

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise CSVValidationError(INVALID_FORMAT_MESSAGE) from exc
    except (pd.errors.ParserError, csv.Error) as exc:
        raise CSVParseError(f"Error parsing CSV: {exc}") from exc

    frame.columns = [str(column).strip() for column in frame.columns]
    if not all(column in frame.columns for column in NORMALIZED_COLUMNS):
        raise CSVValidationError(INVALID_FORMAT_MESSAGE)
    if frame.empty:
        raise EmptyResultError("No transactions found in the file")

    transactions = []
    for number, record in enumerate(frame.fillna("").to_dict(orient="records"), start=1):
        order = record["Order"].strip()
        if order not in ORDER_TYPES:
            raise CSVValidationError(f"Row {number}: unsupported order type '{order}'")
        try:
            transactions.append(
                Transaction(
                    date=parse_trade_date(record["Date"]),
                    ticker=record["Stock Ticker"].strip(),
                    order=order,
                    quantity=abs(float(record["Quantity"])),
                    price=_parse_number(record["Price"], _PRICE_NOISE),
                    amount=_parse_number(record["Amount"], _AMOUNT_NOISE),
                )
            )
        except ValueError as exc:
            raise CSVValidationError(f"Row {number}: {exc}") from exc
    return tuple(transactions)


__all__ = ["INVALID_FORMAT_MESSAGE", "load_transactions", "parse_trade_date"]
