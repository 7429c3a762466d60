"""Helpers for CSV file uploads."""

from __future__ import annotations

from fastapi import HTTPException, UploadFile, status

CSV_CONTENT_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}


async def read_csv_upload(file: UploadFile) -> str:
    """Return the decoded text of an uploaded CSV or raise a 400."""

    filename = file.filename or ""
    if file.content_type not in CSV_CONTENT_TYPES and not filename.lower().endswith(".csv"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload a CSV file")
    raw = await file.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Error reading file") from exc


__all__ = ["read_csv_upload"]
