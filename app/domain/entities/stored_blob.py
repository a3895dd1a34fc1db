"""Domain entities returned by the blob store."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class StoredBlob:
    """Metadata the store reports for a single blob."""

    pathname: str
    url: str
    size: int
    content_type: str | None
    uploaded_at: datetime
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PutResult:
    """Location of a freshly written blob."""

    pathname: str
    url: str


__all__ = ["PutResult", "StoredBlob"]
