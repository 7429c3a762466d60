"""Read/write endpoint for the cached daily closes."""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.schemas import CacheWriteResponse, PriceCachePayload
from app.services.price_cache import PriceCacheStore, get_price_cache
from equity_tracker.errors import StoreReadError, StoreWriteError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def read_cache(store: PriceCacheStore = Depends(get_price_cache)) -> dict[str, Any]:
    """Return the persisted price series; an absent or unreadable cache is ``{}``."""

    try:
        return store.fetch_all()
    except StoreReadError as exc:
        logger.warning("Serving empty cache: %s", exc)
        return {}


@router.post("", response_model=CacheWriteResponse, response_model_exclude_none=True)
async def write_cache(
    request: Request,
    mode: Literal["replace", "merge"] = Query(default="replace"),
    store: PriceCacheStore = Depends(get_price_cache),
) -> Any:
    try:
        payload = PriceCachePayload.model_validate(await request.json())
    except (ValueError, ValidationError) as exc:
        logger.warning("Rejected cache write: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": str(exc)},
        )
    try:
        if mode == "merge":
            store.merge(payload.root)
        else:
            store.replace_all(payload.root)
    except StoreWriteError as exc:
        logger.error("Cache write failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc)},
        )
    return CacheWriteResponse(success=True)


__all__ = ["router"]
