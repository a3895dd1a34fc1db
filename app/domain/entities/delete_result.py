"""Domain entity summarising a completed delete request."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class DeleteResult:
    """Outcome details of a delete, reported whether or not it was verified."""

    pathname: str
    existed: bool | None
    verified: bool
    attempts: int

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["DeleteResult"]
