"""Domain entity describing a file visible to API clients."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.utils.datetime import format_timestamp


@dataclass(frozen=True)
class FileDescriptor:
    """Public description of an uploaded file.

    ``id`` is always the storage path of the blob, which is stable and unique
    for as long as the blob exists.
    """

    id: str
    name: str
    url: str
    size: int
    type: str
    uploaded_at: datetime

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON shape shared by the API and its clients."""

        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "type": self.type,
            "uploadedAt": format_timestamp(self.uploaded_at),
        }


__all__ = ["FileDescriptor"]
