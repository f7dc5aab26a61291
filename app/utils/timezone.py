"""
app/utils/timezone.py — Timestamps for responses and sheet rows
Responses use UTC ISO-8601; the sheet's Timestamp column uses local (IST) time.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytz

from app.config import get_settings

settings = get_settings()

UTC = pytz.utc


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def iso_utc(dt: Optional[datetime] = None) -> str:
    """ISO-8601 with millisecond precision and a Z suffix, e.g. 2026-10-17T09:30:00.123Z."""
    if dt is None:
        dt = utc_now()
    if dt.tzinfo is None:
        dt = UTC.localize(dt)
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def sheet_timezone() -> pytz.BaseTzInfo:
    return pytz.timezone(settings.sheet_timezone)


def format_sheet_timestamp(dt: Optional[datetime] = None) -> str:
    """
    Format a timestamp for the sheet's Timestamp column in the en-IN style
    the spreadsheet has always used: 17/10/2026, 03:05:09 pm
    """
    if dt is None:
        dt = utc_now()
    if dt.tzinfo is None:
        dt = UTC.localize(dt)
    local = dt.astimezone(sheet_timezone())
    return local.strftime("%d/%m/%Y, %I:%M:%S ") + local.strftime("%p").lower()
