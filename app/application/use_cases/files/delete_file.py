"""Use case for deleting a stored file and confirming it is gone."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import anyio
from anyio import to_thread

from app.application.errors import (
    DeleteFailedError,
    InvalidInputError,
    StoreError,
    VerificationFailedError,
)
from app.domain.entities import DeleteResult, StoredBlob
from app.infrastructure.storage import BlobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExistenceProbe:
    """What a single existence check observed."""

    blob: StoredBlob | None
    error: Exception | None = None


def confirmed_absent(probe: ExistenceProbe) -> bool:
    """Return whether ``probe`` confirms the blob is gone.

    Both a lookup that finds nothing and a lookup that fails outright count as
    confirmation; only a successful lookup returning the blob does not.
    """

    return probe.error is not None or probe.blob is None


async def probe_existence(store: BlobStore, pathname: str) -> ExistenceProbe:
    """Look ``pathname`` up in ``store`` without raising."""

    try:
        blob = await to_thread.run_sync(store.head, pathname)
    except StoreError as exc:
        return ExistenceProbe(blob=None, error=exc)
    return ExistenceProbe(blob=blob)


def resolve_pathname(store: BlobStore, file_id: str) -> str:
    """Return the storage path addressed by ``file_id``.

    Identifiers are storage paths; full blob URLs issued by older clients are
    reduced to the path they point at.
    """

    identifier = file_id.strip()
    if not identifier:
        raise InvalidInputError("A file identifier is required", error="Invalid file id")
    if identifier.startswith(("http://", "https://")):
        pathname = store.pathname_from_url(identifier)
        if pathname is None:
            raise InvalidInputError(
                f"{identifier} does not belong to this storage",
                error="Invalid file id",
            )
        return pathname
    return identifier.lstrip("/")


async def delete_file(
    store: BlobStore,
    file_id: str,
    *,
    verify: bool = True,
    attempts: int = 3,
    backoff_seconds: float = 0.5,
    sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
) -> DeleteResult:
    """Delete the file identified by ``file_id`` and optionally verify removal.

    Verification waits ``backoff_seconds * attempt`` before each of the
    ``attempts`` probes and stops at the first one that confirms absence.
    Raises :class:`DeleteFailedError` when the delete call fails and
    :class:`VerificationFailedError` when the blob is still visible after the
    last probe.
    """

    pathname = resolve_pathname(store, file_id)

    initial = await probe_existence(store, pathname)
    if initial.error is not None:
        logger.warning("Existence check for %s failed: %s", pathname, initial.error)
        existed = None
    else:
        existed = initial.blob is not None
        if not existed:
            logger.info("File %s not found before delete; deleting anyway", pathname)

    logger.info("Deleting %s", pathname)
    try:
        await to_thread.run_sync(store.delete, pathname)
    except StoreError as exc:
        logger.error("Delete of %s failed: %s", pathname, exc)
        raise DeleteFailedError(str(exc)) from exc

    if not verify:
        return DeleteResult(pathname=pathname, existed=existed, verified=False, attempts=0)

    for attempt in range(1, attempts + 1):
        await sleep(backoff_seconds * attempt)
        probe = await probe_existence(store, pathname)
        if confirmed_absent(probe):
            logger.info("Delete of %s confirmed on attempt %s", pathname, attempt)
            return DeleteResult(
                pathname=pathname, existed=existed, verified=True, attempts=attempt
            )
        logger.debug(
            "File %s still visible after delete (attempt %s/%s)",
            pathname,
            attempt,
            attempts,
        )

    result = DeleteResult(
        pathname=pathname, existed=existed, verified=False, attempts=attempts
    )
    logger.error("File %s still present after %s checks", pathname, attempts)
    raise VerificationFailedError(
        f"File still exists after {attempts} verification attempts", result=result
    )


__all__ = [
    "ExistenceProbe",
    "confirmed_absent",
    "delete_file",
    "probe_existence",
    "resolve_pathname",
]
