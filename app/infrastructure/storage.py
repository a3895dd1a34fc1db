"""Azure Blob Storage access for uploaded files."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Protocol
from urllib.parse import unquote

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.storage.blob import BlobProperties, BlobServiceClient, ContainerClient, ContentSettings

from app.application.errors import NotConfiguredError, StoreError
from app.config import Settings
from app.domain.entities.stored_blob import PutResult, StoredBlob

logger = logging.getLogger(__name__)

PUBLIC_CACHE_CONTROL = "public, max-age=31536000"


class BlobStore(Protocol):
    """Operations the file use cases need from a blob store.

    Implementations raise :class:`StoreError` for transport or service
    failures. ``head`` returns ``None`` for a missing blob and ``delete`` of a
    missing blob is not an error.
    """

    def put(
        self,
        pathname: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> PutResult: ...

    def head(self, pathname: str) -> Optional[StoredBlob]: ...

    def delete(self, pathname: str) -> None: ...

    def list(self, prefix: str | None = None) -> list[StoredBlob]: ...

    def pathname_from_url(self, url: str) -> Optional[str]: ...


class AzureBlobStore:
    """:class:`BlobStore` backed by a single Azure Storage container."""

    def __init__(self, container_client: ContainerClient) -> None:
        self._container = container_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureBlobStore":
        if not settings.azure_storage_connection_string:
            raise NotConfiguredError("Blob storage not configured")
        try:
            service_client = BlobServiceClient.from_connection_string(
                settings.azure_storage_connection_string
            )
        except ValueError as exc:
            raise NotConfiguredError(f"Invalid storage connection string: {exc}") from exc
        container_client = service_client.get_container_client(
            settings.azure_storage_container_name
        )
        try:
            container_client.create_container(public_access="blob")
        except ResourceExistsError:
            pass
        except AzureError as exc:
            # The container may still be usable with narrower credentials.
            logger.warning(
                "Could not ensure container %s exists: %s",
                settings.azure_storage_container_name,
                exc,
            )
        return cls(container_client)

    @property
    def container_url(self) -> str:
        return self._container.url.rstrip("/")

    def put(
        self,
        pathname: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> PutResult:
        """Upload ``data`` to ``pathname`` without overwriting an existing blob."""

        blob_client = self._container.get_blob_client(pathname)
        content_settings = ContentSettings(
            content_type=content_type, cache_control=PUBLIC_CACHE_CONTROL
        )
        try:
            blob_client.upload_blob(
                data,
                overwrite=False,
                content_settings=content_settings,
                metadata=dict(metadata or {}),
            )
        except AzureError as exc:
            raise StoreError(f"Blob upload failed for {pathname}: {exc}") from exc
        return PutResult(pathname=pathname, url=blob_client.url)

    def head(self, pathname: str) -> Optional[StoredBlob]:
        """Return the blob stored at ``pathname`` or ``None`` when it is missing."""

        blob_client = self._container.get_blob_client(pathname)
        try:
            properties = blob_client.get_blob_properties()
        except ResourceNotFoundError:
            return None
        except AzureError as exc:
            raise StoreError(f"Blob lookup failed for {pathname}: {exc}") from exc
        return self._to_stored_blob(properties, url=blob_client.url)

    def delete(self, pathname: str) -> None:
        """Delete the blob located at ``pathname`` if it exists."""

        blob_client = self._container.get_blob_client(pathname)
        try:
            blob_client.delete_blob()
        except ResourceNotFoundError:
            logger.info("Blob %s was already absent when deleting", pathname)
            return
        except AzureError as exc:
            raise StoreError(f"Blob delete failed for {pathname}: {exc}") from exc

    def list(self, prefix: str | None = None) -> list[StoredBlob]:
        """Return every blob whose name starts with ``prefix``."""

        try:
            blobs: Iterable[BlobProperties] = self._container.list_blobs(
                name_starts_with=prefix, include=["metadata"]
            )
            return [
                self._to_stored_blob(
                    properties,
                    url=self._container.get_blob_client(properties.name).url,
                )
                for properties in blobs
            ]
        except AzureError as exc:
            raise StoreError(f"Blob listing failed: {exc}") from exc

    def pathname_from_url(self, url: str) -> Optional[str]:
        """Return the blob name addressed by ``url`` inside this container."""

        base = self.container_url + "/"
        if not url.startswith(base):
            return None
        pathname = unquote(url[len(base):].split("?", 1)[0])
        return pathname or None

    @staticmethod
    def _to_stored_blob(properties: BlobProperties, *, url: str) -> StoredBlob:
        content_settings = properties.content_settings
        written_at = (
            properties.last_modified
            or properties.creation_time
            or datetime.now(tz=timezone.utc)
        )
        return StoredBlob(
            pathname=properties.name,
            url=url,
            size=int(properties.size or 0),
            content_type=content_settings.content_type if content_settings else None,
            uploaded_at=written_at,
            metadata=dict(properties.metadata or {}),
        )


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the process-wide blob store or raise :class:`NotConfiguredError`."""

    return AzureBlobStore.from_settings(settings)


__all__ = [
    "AzureBlobStore",
    "BlobStore",
    "PUBLIC_CACHE_CONTROL",
    "build_blob_store",
]
