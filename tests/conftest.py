"""Shared fixtures: an in-memory blob store and an application wired to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import quote, unquote

import pytest

from app.application.errors import StoreError
from app.config import Settings
from app.domain.entities import PutResult, StoredBlob

STORE_BASE_URL = "https://files.example.test/uploads"


@dataclass
class FakeBlobStore:
    """In-memory stand-in for :class:`app.infrastructure.storage.AzureBlobStore`.

    ``lingering_heads`` makes ``head`` keep reporting a deleted blob for that
    many calls, mimicking a store whose reads lag behind deletes.
    """

    blobs: dict[str, StoredBlob] = field(default_factory=dict)
    data: dict[str, bytes] = field(default_factory=dict)
    lingering_heads: int = 0
    fail_put: bool = False
    fail_head: bool = False
    fail_delete: bool = False
    fail_list: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)
    _ghosts: dict[str, StoredBlob] = field(default_factory=dict)

    def put(
        self,
        pathname: str,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> PutResult:
        self.calls.append(("put", pathname))
        if self.fail_put:
            raise StoreError("blob service unavailable")
        url = f"{STORE_BASE_URL}/{quote(pathname)}"
        self.blobs[pathname] = StoredBlob(
            pathname=pathname,
            url=url,
            size=len(data),
            content_type=content_type,
            uploaded_at=datetime.now(tz=timezone.utc),
            metadata=dict(metadata or {}),
        )
        self.data[pathname] = data
        return PutResult(pathname=pathname, url=url)

    def head(self, pathname: str) -> Optional[StoredBlob]:
        self.calls.append(("head", pathname))
        if self.fail_head:
            raise StoreError("lookup failed")
        if pathname in self.blobs:
            return self.blobs[pathname]
        if pathname in self._ghosts and self.lingering_heads > 0:
            self.lingering_heads -= 1
            return self._ghosts[pathname]
        return None

    def delete(self, pathname: str) -> None:
        self.calls.append(("delete", pathname))
        if self.fail_delete:
            raise StoreError("delete rejected")
        blob = self.blobs.pop(pathname, None)
        self.data.pop(pathname, None)
        if blob is not None:
            self._ghosts[pathname] = blob

    def list(self, prefix: str | None = None) -> list[StoredBlob]:
        self.calls.append(("list", prefix or ""))
        if self.fail_list:
            raise StoreError("listing failed")
        return [
            blob
            for name, blob in self.blobs.items()
            if prefix is None or name.startswith(prefix)
        ]

    def pathname_from_url(self, url: str) -> Optional[str]:
        base = STORE_BASE_URL + "/"
        if not url.startswith(base):
            return None
        return unquote(url[len(base):]) or None

    def add(
        self,
        pathname: str,
        data: bytes = b"data",
        *,
        content_type: Optional[str] = None,
        uploaded_at: Optional[datetime] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> StoredBlob:
        """Seed a blob directly, bypassing the call log."""

        blob = StoredBlob(
            pathname=pathname,
            url=f"{STORE_BASE_URL}/{quote(pathname)}",
            size=len(data),
            content_type=content_type,
            uploaded_at=uploaded_at or datetime.now(tz=timezone.utc),
            metadata=dict(metadata or {}),
        )
        self.blobs[pathname] = blob
        self.data[pathname] = data
        return blob

    def calls_of(self, operation: str) -> list[str]:
        return [target for name, target in self.calls if name == operation]


def _settings(**overrides) -> Settings:
    values = {
        "azure_storage_connection_string": "UseDevelopmentStorage=true",
        "delete_verification_backoff_seconds": 0,
        "app_timezone": "UTC",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def make_settings():
    return _settings


@pytest.fixture
def settings() -> Settings:
    return _settings()
