"""Broker report normalization endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from fastapi.responses import PlainTextResponse

from app.api.dependencies.uploads import read_csv_upload
from equity_tracker.errors import CSVParseError, EmptyResultError
from equity_tracker.normalizer import normalize_report

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/normalize", response_class=PlainTextResponse)
async def normalize(file: UploadFile = File(..., description="Broker activity report CSV")) -> PlainTextResponse:
    text = await read_csv_upload(file)
    try:
        csv_text = normalize_report(text)
    except CSVParseError as exc:
        logger.warning("Could not parse %s: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except EmptyResultError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    logger.info("Normalized report %s", file.filename)
    return PlainTextResponse(csv_text, media_type="text/csv")


__all__ = ["router"]
