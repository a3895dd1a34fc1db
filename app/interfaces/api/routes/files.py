"""Routes for uploading, listing and deleting stored files."""

import logging
from datetime import date
from typing import BinaryIO

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from app.application.errors import (
    DeleteFailedError,
    FileStorageError,
    InvalidInputError,
    NotConfiguredError,
    StoreError,
    VerificationFailedError,
)
from app.application.use_cases.files import (
    delete_file as delete_file_uc,
    list_files as list_files_uc,
    upload_file as upload_file_uc,
)
from app.config import Settings
from app.infrastructure.storage import BlobStore
from app.interfaces.api.dependencies import (
    get_app_settings,
    get_optional_blob_store,
    require_blob_store,
)
from app.interfaces.api.schemas import (
    DeleteResponse,
    DeleteResultRead,
    ErrorResponse,
    FileListResponse,
    FileRead,
    UploadResponse,
)
from app.utils.datetime import resolve_timezone

router = APIRouter(tags=["files"])
logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

_ERROR_STATUS: dict[type[FileStorageError], int] = {
    NotConfiguredError: status.HTTP_503_SERVICE_UNAVAILABLE,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
    DeleteFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    VerificationFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _status_for(exc: FileStorageError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    error: str,
    details: str | None,
    status_code: int,
    *,
    result: DeleteResultRead | None = None,
) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details, result=result)
    content = {key: value for key, value in payload.model_dump().items() if value is not None}
    return JSONResponse(status_code=status_code, content=content)


def _storage_error_response(exc: FileStorageError) -> JSONResponse:
    result = None
    if isinstance(exc, VerificationFailedError):
        result = DeleteResultRead.from_result(exc.result)
    return _error_response(exc.error, exc.details, _status_for(exc), result=result)


def read_capped(stream: BinaryIO, limit: int) -> bytes:
    """Read at most ``limit + 1`` bytes so an oversized body is never fully loaded.

    A result longer than ``limit`` means the upload exceeds it.
    """

    return stream.read(limit + 1)


def _list_response(payload: FileListResponse) -> JSONResponse:
    return JSONResponse(
        content=payload.model_dump(by_alias=True, exclude_none=True),
        headers=NO_CACHE_HEADERS,
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def upload_file(
    file: UploadFile | str | None = File(default=None),
    date_value: str | None = Form(default=None, alias="date"),
    store: BlobStore | None = Depends(get_optional_blob_store),
    settings: Settings = Depends(get_app_settings),
):
    """Store the submitted file and return its descriptor.

    A ``file`` part without a filename arrives as plain text and is rejected
    as an invalid file name.
    """

    try:
        blob_store = require_blob_store(store)
        if isinstance(file, str):
            raise InvalidInputError(
                "File must have a valid name", error="Invalid file name"
            )
        file_bytes = (
            read_capped(file.file, settings.max_upload_bytes) if file is not None else None
        )
        descriptor = upload_file_uc(
            blob_store,
            file_bytes=file_bytes,
            filename=file.filename if file is not None else None,
            content_type=file.content_type if file is not None else None,
            upload_date=date_value,
            max_bytes=settings.max_upload_bytes,
            prefix=settings.upload_prefix,
            layout=settings.upload_path_layout,
        )
    except FileStorageError as exc:
        if isinstance(exc, NotConfiguredError):
            logger.error("Upload rejected: %s", exc.details)
        else:
            logger.warning("Upload rejected: %s (%s)", exc.error, exc.details)
        return _storage_error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected error uploading file: %s", exc)
        return _error_response(
            "Upload failed", str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return UploadResponse.from_descriptor(descriptor)


@router.get("/files", response_model=FileListResponse)
def list_files(
    date_filter: str | None = Query(default=None, alias="date"),
    store: BlobStore | None = Depends(get_optional_blob_store),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Return every stored file, freshly read from the store and never cached."""

    day: date | None = None
    if date_filter:
        try:
            day = date.fromisoformat(date_filter)
        except ValueError:
            return _error_response(
                "Invalid date format",
                "Expected a date in YYYY-MM-DD format",
                status.HTTP_400_BAD_REQUEST,
            )

    try:
        files = list_files_uc(
            require_blob_store(store),
            prefix=settings.upload_prefix,
            day=day,
            tz=resolve_timezone(settings.app_timezone),
        )
    except FileStorageError as exc:
        logger.error("Error fetching files: %s", exc.details)
        return _list_response(FileListResponse(success=False, files=[], error=exc.error))
    except Exception as exc:
        logger.exception("Unexpected error fetching files: %s", exc)
        return _list_response(
            FileListResponse(success=False, files=[], error="Failed to fetch files")
        )

    return _list_response(
        FileListResponse(
            success=True,
            files=[FileRead.from_descriptor(descriptor) for descriptor in files],
        )
    )


@router.delete(
    "/files/{file_id:path}",
    response_model=DeleteResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def delete_file(
    file_id: str,
    store: BlobStore | None = Depends(get_optional_blob_store),
    settings: Settings = Depends(get_app_settings),
):
    """Delete the file identified by ``file_id`` and confirm it is gone."""

    try:
        result = await delete_file_uc(
            require_blob_store(store),
            file_id,
            verify=settings.delete_verification_enabled,
            attempts=settings.delete_verification_attempts,
            backoff_seconds=settings.delete_verification_backoff_seconds,
        )
    except FileStorageError as exc:
        logger.error("Delete of %s failed: %s (%s)", file_id, exc.error, exc.details)
        return _storage_error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected error deleting %s: %s", file_id, exc)
        return _error_response(
            "Failed to delete file", str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    message = (
        "File deleted and verified"
        if result.verified
        else "File deleted successfully"
    )
    return DeleteResponse(result=DeleteResultRead.from_result(result), message=message)


__all__ = ["NO_CACHE_HEADERS", "read_capped", "router"]
