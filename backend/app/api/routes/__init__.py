"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .cache import router as cache_router
from .equity import router as equity_router
from .transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
api_router.include_router(equity_router, prefix="/equity", tags=["equity"])
api_router.include_router(cache_router, prefix="/cache", tags=["cache"])

__all__ = ["api_router"]
