"""Errors raised by the file storage use cases."""

from __future__ import annotations

from app.domain.entities.delete_result import DeleteResult


class FileStorageError(RuntimeError):
    """Base class for failures surfaced to API callers."""

    error = "File storage error"

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


class NotConfiguredError(FileStorageError):
    """The blob store credentials are missing."""

    error = "Storage configuration error"


class InvalidInputError(FileStorageError, ValueError):
    """The request is malformed and was rejected before touching the store."""

    error = "Invalid input"

    def __init__(self, details: str, *, error: str | None = None) -> None:
        super().__init__(details)
        if error is not None:
            self.error = error


class StoreError(FileStorageError):
    """The blob store rejected or failed a request."""

    error = "Storage service error"


class DeleteFailedError(FileStorageError):
    """The delete call itself failed."""

    error = "Failed to delete file"


class VerificationFailedError(FileStorageError):
    """The delete call succeeded but the blob was still visible afterwards."""

    error = "Delete verification failed"

    def __init__(self, details: str, *, result: DeleteResult) -> None:
        super().__init__(details)
        self.result = result


__all__ = [
    "DeleteFailedError",
    "FileStorageError",
    "InvalidInputError",
    "NotConfiguredError",
    "StoreError",
    "VerificationFailedError",
]
