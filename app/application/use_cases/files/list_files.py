"""Use case for listing the files held in the blob store."""

from __future__ import annotations

import logging
from datetime import date, tzinfo

from app.domain.entities import FileDescriptor, StoredBlob
from app.infrastructure.storage import BlobStore
from app.utils.datetime import calendar_day, parse_timestamp

from .naming import display_name_from_path, resolve_content_type
from .upload_file import UPLOADED_AT_METADATA_KEY

logger = logging.getLogger(__name__)


def describe_blob(blob: StoredBlob) -> FileDescriptor:
    """Return the descriptor clients see for ``blob``."""

    name = display_name_from_path(blob.pathname)
    uploaded_at = blob.uploaded_at
    recorded = blob.metadata.get(UPLOADED_AT_METADATA_KEY)
    if recorded:
        try:
            uploaded_at = parse_timestamp(recorded)
        except ValueError:
            logger.warning(
                "Ignoring malformed %s metadata on %s: %r",
                UPLOADED_AT_METADATA_KEY,
                blob.pathname,
                recorded,
            )
    return FileDescriptor(
        id=blob.pathname,
        name=name,
        url=blob.url,
        size=blob.size,
        type=resolve_content_type(blob.content_type, name),
        uploaded_at=uploaded_at,
    )


def list_files(
    store: BlobStore,
    *,
    prefix: str = "uploads",
    day: date | None = None,
    tz: tzinfo | None = None,
) -> list[FileDescriptor]:
    """Return every stored file, newest first, optionally limited to ``day``.

    ``day`` is matched against ``uploaded_at`` expressed in ``tz``.
    """

    blobs = store.list(prefix=f"{prefix}/")
    files = [describe_blob(blob) for blob in blobs]
    if day is not None:
        files = [item for item in files if calendar_day(item.uploaded_at, tz) == day]
    files.sort(key=lambda item: item.uploaded_at, reverse=True)
    logger.debug("Listed %s files (day=%s)", len(files), day)
    return files


__all__ = ["describe_blob", "list_files"]
