"""Use case for writing an uploaded file to the blob store."""

from __future__ import annotations

import logging
import time

from app.application.errors import InvalidInputError
from app.domain.entities import FileDescriptor
from app.infrastructure.storage import BlobStore
from app.utils.datetime import format_timestamp, parse_upload_date

from .naming import PathLayout, build_storage_path, resolve_content_type

logger = logging.getLogger(__name__)

UPLOADED_AT_METADATA_KEY = "uploaded_at"


def upload_file(
    store: BlobStore,
    *,
    file_bytes: bytes | None,
    filename: str | None,
    content_type: str | None = None,
    upload_date: str | None = None,
    max_bytes: int,
    prefix: str = "uploads",
    layout: PathLayout = "flat",
) -> FileDescriptor:
    """Validate the upload, write it to ``store`` and describe the stored file.

    ``uploaded_at`` on the result is the caller supplied date (default now),
    which is also recorded on the blob so listings report the same value.
    """

    if file_bytes is None:
        raise InvalidInputError(
            "Please select a file to upload", error="No file provided"
        )
    if len(file_bytes) > max_bytes:
        raise InvalidInputError(
            f"Maximum file size is {max_bytes / (1024 * 1024):g}MB",
            error="File too large",
        )
    if filename is None or not filename.strip():
        raise InvalidInputError(
            "File must have a valid name", error="Invalid file name"
        )
    try:
        uploaded_at = parse_upload_date(upload_date)
    except ValueError as exc:
        raise InvalidInputError(
            "Please provide a valid date", error="Invalid date format"
        ) from exc

    pathname = build_storage_path(
        filename,
        timestamp_ms=time.time_ns() // 1_000_000,
        prefix=prefix,
        layout=layout,
        uploaded_at=uploaded_at,
    )
    resolved_type = resolve_content_type(content_type, filename)

    logger.info(
        "Uploading %s to %s (%s bytes, %s)",
        filename,
        pathname,
        len(file_bytes),
        resolved_type,
    )
    put_result = store.put(
        pathname,
        file_bytes,
        content_type=resolved_type,
        metadata={UPLOADED_AT_METADATA_KEY: format_timestamp(uploaded_at)},
    )
    logger.info("Stored %s at %s", put_result.pathname, put_result.url)

    return FileDescriptor(
        id=put_result.pathname,
        name=filename,
        url=put_result.url,
        size=len(file_bytes),
        type=resolved_type,
        uploaded_at=uploaded_at,
    )


__all__ = ["UPLOADED_AT_METADATA_KEY", "upload_file"]
