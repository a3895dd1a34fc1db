"""Async client for the file storage API and its session state controller."""

from .api import FileStorageApi, FileStorageApiError, descriptor_from_payload
from .state import (
    DeleteOutcome,
    EntryState,
    FileListController,
    Notification,
    UploadItem,
    UploadOutcome,
)

__all__ = [
    "DeleteOutcome",
    "EntryState",
    "FileListController",
    "FileStorageApi",
    "FileStorageApiError",
    "Notification",
    "UploadItem",
    "UploadOutcome",
    "descriptor_from_payload",
]
