"""Dependencies wiring the price fetch coordinator."""

from __future__ import annotations

from fastapi import Depends

from app.config import get_settings
from app.providers.alpha_vantage import AlphaVantageClient, get_alpha_vantage_client
from app.services.price_fetch import PriceFetchCoordinator


def get_price_fetch_coordinator(
    client: AlphaVantageClient = Depends(get_alpha_vantage_client),
) -> PriceFetchCoordinator:
    settings = get_settings()
    return PriceFetchCoordinator(
        client,
        max_concurrency=settings.price_fetch_concurrency,
        timeout_seconds=settings.price_fetch_timeout_seconds,
        output_size=settings.alphavantage_output_size,
    )


__all__ = ["get_price_fetch_coordinator"]
