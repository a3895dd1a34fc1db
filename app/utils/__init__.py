"""Utility helpers for reusable functionality."""

from .datetime import (
    calendar_day,
    ensure_utc,
    format_timestamp,
    get_app_timezone,
    now_utc,
    parse_timestamp,
    parse_upload_date,
    resolve_timezone,
)
from .retry import retry_async

__all__ = [
    "calendar_day",
    "ensure_utc",
    "format_timestamp",
    "get_app_timezone",
    "now_utc",
    "parse_timestamp",
    "parse_upload_date",
    "resolve_timezone",
    "retry_async",
]
