"""Helpers deriving storage paths, display names and MIME types for files."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Final, Literal

_ILLEGAL_PATH_CHARACTERS: Final[re.Pattern[str]] = re.compile(r'[<>:"\\|?*/\s]')

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"

CONTENT_TYPES_BY_EXTENSION: Final[dict[str, str]] = {
    "html": "text/html",
    "htm": "text/html",
    "pdf": "application/pdf",
    "py": "text/x-python",
    "txt": "text/plain",
    "json": "application/json",
    "css": "text/css",
    "js": "text/javascript",
    "ts": "text/typescript",
    "jsx": "text/jsx",
    "tsx": "text/tsx",
}

PathLayout = Literal["flat", "dated"]


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe inside a storage path with ``_``."""

    return _ILLEGAL_PATH_CHARACTERS.sub("_", name.strip())


def build_storage_path(
    original_name: str,
    *,
    timestamp_ms: int,
    prefix: str = "uploads",
    layout: PathLayout = "flat",
    uploaded_at: datetime | None = None,
) -> str:
    """Return the unique path under which an upload is written.

    The ``<timestamp_ms>-`` prefix only exists to keep paths unique and is
    removed again by :func:`display_name_from_path`.
    """

    file_name = f"{timestamp_ms}-{sanitize_filename(original_name)}"
    if layout == "dated":
        if uploaded_at is None:
            raise ValueError("The dated layout requires the upload date")
        return (
            f"{prefix}/{uploaded_at.year:04d}/{uploaded_at.month:02d}/"
            f"{uploaded_at.day:02d}/{file_name}"
        )
    return f"{prefix}/{file_name}"


def display_name_from_path(pathname: str) -> str:
    """Return the user facing name for the blob stored at ``pathname``."""

    segment = pathname.rsplit("/", 1)[-1]
    _, separator, remainder = segment.partition("-")
    if not separator:
        return segment
    return remainder


def guess_content_type(name: str) -> str:
    """Return the MIME type for ``name`` based on its extension."""

    _, dot, extension = name.rpartition(".")
    if not dot:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES_BY_EXTENSION.get(extension.lower(), DEFAULT_CONTENT_TYPE)


def resolve_content_type(reported: str | None, name: str) -> str:
    """Prefer a specific store-reported type, falling back to the extension table."""

    if reported:
        normalized = reported.split(";", 1)[0].strip().lower()
        if normalized and normalized != DEFAULT_CONTENT_TYPE:
            return reported
    return guess_content_type(name)


__all__ = [
    "CONTENT_TYPES_BY_EXTENSION",
    "DEFAULT_CONTENT_TYPE",
    "PathLayout",
    "build_storage_path",
    "display_name_from_path",
    "guess_content_type",
    "resolve_content_type",
    "sanitize_filename",
]
