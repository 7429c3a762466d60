"""Portfolio equity series endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.api.dependencies.prices import get_price_fetch_coordinator
from app.api.dependencies.uploads import read_csv_upload
from app.config import get_settings
from app.schemas import ChartSeriesSchema, EquitySeriesResponse, TransactionSchema
from app.services.price_cache import PriceCacheStore, get_price_cache
from app.services.price_fetch import PriceFetchCoordinator, load_cached_prices, refresh_portfolio_prices
from equity_tracker import TrackerSession, chart_series, load_transactions
from equity_tracker.errors import CSVParseError, CSVValidationError, EmptyResultError
from equity_tracker.pipeline import positions_on

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/series", response_model=EquitySeriesResponse)
async def equity_series(
    file: UploadFile = File(..., description="Normalized trade CSV"),
    fetch_prices: bool = Query(default=True, description="Fetch closes for symbols missing from the cache"),
    store: PriceCacheStore = Depends(get_price_cache),
    coordinator: PriceFetchCoordinator = Depends(get_price_fetch_coordinator),
) -> EquitySeriesResponse:
    settings = get_settings()
    text = await read_csv_upload(file)
    try:
        transactions = load_transactions(text)
    except CSVParseError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (CSVValidationError, EmptyResultError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    session = TrackerSession.empty(settings.others_threshold_pct).with_transactions(transactions)
    symbols = session.symbols()
    logger.info("Loaded %d transactions across %d symbols", len(transactions), len(symbols))

    if fetch_prices:
        prices = await refresh_portfolio_prices(
            symbols,
            store,
            coordinator,
            max_age_days=settings.price_cache_max_age_days,
        )
    else:
        prices = load_cached_prices(store)
    wanted = set(symbols)
    session = session.with_prices({symbol: closes for symbol, closes in prices.items() if symbol in wanted})

    last_date = session.chart[-1].date if session.chart else None
    positions = positions_on(session.transactions, last_date) if last_date else {}
    return EquitySeriesResponse(
        symbols=symbols,
        transactions=[TransactionSchema(**tx.as_dict()) for tx in session.transactions],
        points=[point.as_record() for point in session.chart],
        series=[
            ChartSeriesSchema(key=s.key, name=s.name, equity=s.equity, percentage=s.percentage, label=s.label)
            for s in chart_series(session.chart)
        ],
        positions={symbol: shares for symbol, shares in positions.items() if shares != 0},
    )


__all__ = ["router"]
