"""HTTP client for the file storage API."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.domain.entities import FileDescriptor
from app.utils.datetime import parse_timestamp

logger = logging.getLogger(__name__)


class FileStorageApiError(RuntimeError):
    """The API answered, but reported that the request failed."""

    def __init__(self, message: str, *, status_code: int | None = None, details: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def descriptor_from_payload(payload: dict[str, Any]) -> FileDescriptor:
    """Build a :class:`FileDescriptor` from its JSON representation."""

    try:
        return FileDescriptor(
            id=str(payload["id"]),
            name=str(payload["name"]),
            url=str(payload["url"]),
            size=int(payload["size"]),
            type=str(payload.get("type") or "application/octet-stream"),
            uploaded_at=parse_timestamp(str(payload["uploadedAt"])),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise FileStorageApiError(f"Malformed file payload: {exc}") from exc


def _raise_for_failure(response: httpx.Response, fallback: str) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        body = None

    if response.is_success and isinstance(body, dict) and body.get("success", True):
        return body
    if response.is_success and isinstance(body, list):
        return {"success": True, "files": body}

    error = fallback
    details = None
    if isinstance(body, dict):
        error = str(body.get("error") or body.get("message") or fallback)
        details = body.get("details")
    elif not response.is_success:
        error = f"Server error ({response.status_code})"
    raise FileStorageApiError(error, status_code=response.status_code, details=details)


class FileStorageApi:
    """Thin async wrapper around the ``/upload`` and ``/files`` endpoints."""

    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def list_files(self) -> list[FileDescriptor]:
        response = await self._client.get("/files", headers={"Cache-Control": "no-cache"})
        body = _raise_for_failure(response, "Failed to fetch files")
        return [descriptor_from_payload(item) for item in body.get("files", [])]

    async def upload(
        self,
        name: str,
        data: bytes,
        *,
        content_type: str | None = None,
        upload_date: date | datetime | str | None = None,
    ) -> FileDescriptor:
        form: dict[str, str] = {}
        if isinstance(upload_date, (date, datetime)):
            form["date"] = upload_date.isoformat()
        elif upload_date:
            form["date"] = upload_date
        file_field = (name, data, content_type) if content_type else (name, data)
        response = await self._client.post("/upload", data=form, files={"file": file_field})
        body = _raise_for_failure(response, f"Failed to upload {name}")
        return descriptor_from_payload(body)

    async def delete(self, file_id: str) -> dict[str, Any]:
        response = await self._client.delete(f"/files/{quote(file_id, safe='')}")
        body = _raise_for_failure(response, "Failed to delete file")
        logger.debug("Delete of %s answered %s", file_id, body)
        return body


__all__ = ["FileStorageApi", "FileStorageApiError", "descriptor_from_payload"]
