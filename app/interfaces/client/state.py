"""Session-local file list kept consistent with the storage API.

The controller applies uploads and deletes optimistically, rolls a delete
back when the server rejects it and reconciles with the server listing after
a short debounce, since a fresh write may not show up in listings right away.
Each known file id moves through :class:`EntryState`; only server responses
and the delete safety timeout change it.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, Literal, Optional

import httpx

from app.domain.entities import FileDescriptor
from app.utils.datetime import calendar_day
from app.utils.retry import retry_async

from .api import FileStorageApi, FileStorageApiError

logger = logging.getLogger(__name__)

REQUEST_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, FileStorageApiError)


class EntryState(str, Enum):
    PRESENT = "present"
    PENDING_DELETE = "pending_delete"
    DELETED = "deleted"


class UploadOutcome(str, Enum):
    UPLOADED = "uploaded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    FAILED = "failed"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class Notification:
    kind: str
    title: str
    message: str


@dataclass(frozen=True)
class UploadItem:
    name: str
    data: bytes
    content_type: str | None = None


NotificationCallback = Callable[[Notification], None]
SortKey = Literal["name", "date", "size"]
SortOrder = Literal["asc", "desc"]

_SORT_KEYS: dict[str, Callable[[FileDescriptor], object]] = {
    "name": lambda item: item.name.casefold(),
    "date": lambda item: item.uploaded_at,
    "size": lambda item: item.size,
}


def _log_notification(notification: Notification) -> None:
    level = logging.ERROR if notification.kind == "error" else logging.INFO
    logger.log(level, "%s: %s", notification.title, notification.message)


class FileListController:
    """Own the list of files shown during a session."""

    def __init__(
        self,
        api: FileStorageApi,
        *,
        notify: Optional[NotificationCallback] = None,
        load_attempts: int = 2,
        load_retry_delay: float = 1.0,
        refresh_delay: float = 3.0,
        delete_safety_timeout: float = 10.0,
    ) -> None:
        self._api = api
        self._notify = notify or _log_notification
        self._load_attempts = load_attempts
        self._load_retry_delay = load_retry_delay
        self._refresh_delay = refresh_delay
        self._delete_safety_timeout = delete_safety_timeout

        self._files: list[FileDescriptor] = []
        self._states: dict[str, EntryState] = {}
        self._local_uploads: set[str] = set()
        self._pending_tokens: dict[str, int] = {}
        self._token_counter = itertools.count(1)
        self._refresh_task: Optional[asyncio.Task[None]] = None

    @property
    def files(self) -> list[FileDescriptor]:
        return list(self._files)

    def state_of(self, file_id: str) -> Optional[EntryState]:
        return self._states.get(file_id)

    def is_deleting(self, file_id: str) -> bool:
        return self._states.get(file_id) is EntryState.PENDING_DELETE

    def files_on(self, day: date) -> list[FileDescriptor]:
        """Return the files whose upload date falls on ``day``."""

        return [item for item in self._files if calendar_day(item.uploaded_at) == day]

    def search(self, term: str) -> list[FileDescriptor]:
        needle = term.strip().lower()
        if not needle:
            return self.files
        return [item for item in self._files if needle in item.name.lower()]

    def sorted_files(
        self,
        by: SortKey = "date",
        order: SortOrder = "desc",
        *,
        files: Optional[Iterable[FileDescriptor]] = None,
    ) -> list[FileDescriptor]:
        """Return ``files`` (default: every file) ordered by name, date or size.

        Names compare case-insensitively. Ties keep their current order.
        """

        if by not in _SORT_KEYS:
            raise ValueError(f"Unknown sort key: {by!r}")
        if order not in ("asc", "desc"):
            raise ValueError(f"Unknown sort order: {order!r}")
        items = list(self._files if files is None else files)
        return sorted(items, key=_SORT_KEYS[by], reverse=order == "desc")

    async def load(self) -> bool:
        """Fetch the initial listing, retrying a failed fetch once."""

        try:
            server_files = await retry_async(
                self._api.list_files,
                attempts=self._load_attempts,
                delay=self._load_retry_delay,
                retry_on=REQUEST_ERRORS,
            )
        except REQUEST_ERRORS as exc:
            logger.error("Error loading files: %s", exc)
            self._files = []
            self._notify(
                Notification("error", "Load Failed", f"Could not load files: {exc}")
            )
            return False

        self._reconcile(server_files)
        return True

    async def refresh(self) -> bool:
        """Re-read the server listing and merge it into the local list."""

        try:
            server_files = await self._api.list_files()
        except REQUEST_ERRORS as exc:
            logger.warning("Background refresh failed: %s", exc)
            return False
        self._reconcile(server_files)
        return True

    def schedule_refresh(self, delay: Optional[float] = None) -> asyncio.Task[None]:
        """Refresh after ``delay`` seconds, replacing any refresh already scheduled."""

        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        wait = self._refresh_delay if delay is None else delay
        self._refresh_task = asyncio.create_task(self._delayed_refresh(wait))
        return self._refresh_task

    async def _delayed_refresh(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.refresh()

    async def upload(
        self,
        name: str,
        data: bytes,
        *,
        content_type: str | None = None,
        upload_date: date | datetime | str | None = None,
        cancel: Optional[asyncio.Event] = None,
        announce: bool = True,
    ) -> UploadOutcome:
        """Upload one file, prepending it locally as soon as the server accepts it.

        Setting ``cancel`` aborts the request and reports
        :attr:`UploadOutcome.CANCELLED`. ``announce=False`` skips the success
        notification; failures are always reported.
        """

        request = asyncio.ensure_future(
            self._api.upload(
                name, data, content_type=content_type, upload_date=upload_date
            )
        )
        waiters: set[asyncio.Future] = {request}
        cancel_waiter: Optional[asyncio.Task[bool]] = None
        if cancel is not None:
            cancel_waiter = asyncio.create_task(cancel.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            if not request.done():
                request.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await request

        if request not in done:
            logger.info("Upload of %s cancelled", name)
            self._notify(
                Notification("info", "Upload Cancelled", f"Upload of {name} was cancelled")
            )
            return UploadOutcome.CANCELLED

        try:
            descriptor = request.result()
        except REQUEST_ERRORS as exc:
            logger.error("Upload of %s failed: %s", name, exc)
            self._notify(
                Notification("error", "Upload Failed", f"Failed to upload {name}: {exc}")
            )
            return UploadOutcome.FAILED

        self._files = [descriptor] + [
            item for item in self._files if item.id != descriptor.id
        ]
        self._states[descriptor.id] = EntryState.PRESENT
        self._local_uploads.add(descriptor.id)
        if announce:
            self._notify(Notification("success", "Upload Complete", f"Uploaded {name}"))
        self.schedule_refresh()
        return UploadOutcome.UPLOADED

    async def upload_many(
        self,
        items: Iterable[UploadItem],
        *,
        upload_date: date | datetime | str | None = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> list[UploadOutcome]:
        """Upload ``items`` one after another and report a single summary.

        Each failure is still notified on its own. A cancellation stops the
        batch; files not yet started are skipped.
        """

        outcomes: list[UploadOutcome] = []
        for item in items:
            outcome = await self.upload(
                item.name,
                item.data,
                content_type=item.content_type,
                upload_date=upload_date,
                cancel=cancel,
                announce=False,
            )
            outcomes.append(outcome)
            if outcome is UploadOutcome.CANCELLED:
                break

        uploaded = outcomes.count(UploadOutcome.UPLOADED)
        failed = outcomes.count(UploadOutcome.FAILED)
        noun = "file" if uploaded == 1 else "files"
        if uploaded and not failed:
            self._notify(
                Notification("success", "Upload Complete", f"Successfully uploaded {uploaded} {noun}")
            )
        elif uploaded and failed:
            self._notify(
                Notification("info", "Upload Partial", f"Uploaded {uploaded} {noun}, {failed} failed")
            )
        logger.info("Batch upload finished: %s uploaded, %s failed", uploaded, failed)
        return outcomes

    async def delete(self, file_id: str) -> DeleteOutcome:
        """Remove ``file_id`` locally, then ask the server to delete it.

        A delete already in flight for the same id is suppressed. A rejected
        delete puts the file back at the head of the list.
        """

        if self._states.get(file_id) is EntryState.PENDING_DELETE:
            logger.debug("Delete of %s already in progress", file_id)
            return DeleteOutcome.SUPPRESSED

        descriptor = next((item for item in self._files if item.id == file_id), None)
        if descriptor is None:
            logger.debug("Ignoring delete of unknown file %s", file_id)
            return DeleteOutcome.SUPPRESSED

        token = next(self._token_counter)
        self._pending_tokens[file_id] = token
        self._files = [item for item in self._files if item.id != file_id]
        self._states[file_id] = EntryState.PENDING_DELETE

        loop = asyncio.get_running_loop()
        safety_timer = loop.call_later(
            self._delete_safety_timeout,
            self._expire_pending_delete,
            descriptor,
            token,
        )
        try:
            await self._api.delete(file_id)
        except REQUEST_ERRORS as exc:
            logger.error("Delete of %s failed: %s", file_id, exc)
            self._rollback_delete(descriptor, token)
            self._notify(
                Notification(
                    "error", "Delete Failed", f"Failed to delete {descriptor.name}: {exc}"
                )
            )
            return DeleteOutcome.FAILED
        except asyncio.CancelledError:
            self._rollback_delete(descriptor, token)
            raise
        finally:
            safety_timer.cancel()

        self._confirm_delete(file_id, token)
        self._notify(
            Notification("success", "File Deleted", f"Deleted {descriptor.name}")
        )
        self.schedule_refresh()
        return DeleteOutcome.DELETED

    async def aclose(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._refresh_task

    def _expire_pending_delete(self, descriptor: FileDescriptor, token: int) -> None:
        if self._pending_tokens.get(descriptor.id) != token:
            return
        logger.warning(
            "Delete of %s unanswered after %.0fs; clearing pending state",
            descriptor.id,
            self._delete_safety_timeout,
        )
        self._pending_tokens.pop(descriptor.id, None)
        self._restore(descriptor)

    def _rollback_delete(self, descriptor: FileDescriptor, token: int) -> None:
        current = self._pending_tokens.get(descriptor.id)
        if current is not None and current != token:
            # A newer delete owns this entry now.
            return
        self._pending_tokens.pop(descriptor.id, None)
        if self._states.get(descriptor.id) is EntryState.DELETED:
            # An earlier delete already succeeded on the server.
            return
        self._restore(descriptor)

    def _confirm_delete(self, file_id: str, token: int) -> None:
        if self._pending_tokens.get(file_id) == token:
            self._pending_tokens.pop(file_id, None)
        self._files = [item for item in self._files if item.id != file_id]
        self._states[file_id] = EntryState.DELETED
        self._local_uploads.discard(file_id)

    def _restore(self, descriptor: FileDescriptor) -> None:
        if all(item.id != descriptor.id for item in self._files):
            self._files.insert(0, descriptor)
        self._states[descriptor.id] = EntryState.PRESENT

    def _reconcile(self, server_files: Iterable[FileDescriptor]) -> None:
        server_files = list(server_files)
        server_ids = {item.id for item in server_files}

        self._local_uploads -= server_ids

        hidden = {EntryState.PENDING_DELETE, EntryState.DELETED}
        merged = [item for item in server_files if self._states.get(item.id) not in hidden]
        local_only = [
            item
            for item in self._files
            if item.id in self._local_uploads and item.id not in server_ids
        ]
        self._files = local_only + merged

        visible = {item.id for item in self._files}
        for file_id, state in list(self._states.items()):
            if state is EntryState.PENDING_DELETE:
                continue
            if state is EntryState.DELETED and file_id in server_ids:
                # The store has not caught up with the delete yet.
                continue
            if file_id not in visible:
                del self._states[file_id]
        for item in merged:
            self._states[item.id] = EntryState.PRESENT
        logger.debug(
            "Reconciled %s server files with %s local-only uploads",
            len(merged),
            len(local_only),
        )


__all__ = [
    "DeleteOutcome",
    "EntryState",
    "FileListController",
    "Notification",
    "UploadItem",
    "UploadOutcome",
]
