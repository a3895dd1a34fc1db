"""FastAPI dependency utilities."""

from fastapi import Request

from app.application.errors import NotConfiguredError
from app.config import Settings, get_settings
from app.infrastructure.storage import BlobStore


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""

    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return get_settings()
    return settings


def get_optional_blob_store(request: Request) -> BlobStore | None:
    """Return the process-wide blob store, or ``None`` when storage is unconfigured."""

    return getattr(request.app.state, "blob_store", None)


def require_blob_store(store: BlobStore | None) -> BlobStore:
    """Return ``store`` or raise :class:`NotConfiguredError` when it is missing."""

    if store is None:
        raise NotConfiguredError("Blob storage not configured")
    return store
