"""Tests for the delete use case and its verification polling."""

from __future__ import annotations

import pytest

from app.application.errors import (
    DeleteFailedError,
    InvalidInputError,
    StoreError,
    VerificationFailedError,
)
from app.application.use_cases.files.delete_file import (
    ExistenceProbe,
    confirmed_absent,
    delete_file,
    resolve_pathname,
)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def test_confirmed_absent_treats_missing_and_failed_probes_as_gone(store):
    blob = store.add("uploads/1-a.txt")

    assert confirmed_absent(ExistenceProbe(blob=None)) is True
    assert confirmed_absent(ExistenceProbe(blob=None, error=StoreError("boom"))) is True
    assert confirmed_absent(ExistenceProbe(blob=blob)) is False


def test_resolve_pathname_accepts_paths_and_store_urls(store):
    blob = store.add("uploads/1-a b.txt")

    assert resolve_pathname(store, "uploads/1-a.txt") == "uploads/1-a.txt"
    assert resolve_pathname(store, "/uploads/1-a.txt") == "uploads/1-a.txt"
    assert resolve_pathname(store, blob.url) == "uploads/1-a b.txt"
    with pytest.raises(InvalidInputError):
        resolve_pathname(store, "https://elsewhere.test/uploads/1-a.txt")
    with pytest.raises(InvalidInputError):
        resolve_pathname(store, "  ")


@pytest.mark.anyio
async def test_verification_passes_on_first_probe_when_store_reports_not_found(store):
    store.add("uploads/1-a.txt")
    sleep = RecordingSleep()

    result = await delete_file(store, "uploads/1-a.txt", backoff_seconds=0.5, sleep=sleep)

    assert result.verified is True
    assert result.attempts == 1
    assert result.existed is True
    assert sleep.delays == [0.5]
    assert "uploads/1-a.txt" not in store.blobs


@pytest.mark.anyio
async def test_verification_backs_off_linearly_until_blob_disappears(store):
    store.add("uploads/1-a.txt")
    store.lingering_heads = 2
    sleep = RecordingSleep()

    result = await delete_file(store, "uploads/1-a.txt", backoff_seconds=0.5, sleep=sleep)

    assert result.verified is True
    assert result.attempts == 3
    assert sleep.delays == [0.5, 1.0, 1.5]


@pytest.mark.anyio
async def test_verification_failure_after_all_attempts_carries_result(store):
    store.add("uploads/1-a.txt")
    store.lingering_heads = 10

    with pytest.raises(VerificationFailedError) as excinfo:
        await delete_file(store, "uploads/1-a.txt", sleep=RecordingSleep())

    result = excinfo.value.result
    assert result.pathname == "uploads/1-a.txt"
    assert result.verified is False
    assert result.attempts == 3
    assert store.calls_of("delete") == ["uploads/1-a.txt"]


@pytest.mark.anyio
async def test_probe_errors_count_as_confirmation(store):
    store.add("uploads/1-a.txt")
    store.fail_head = True

    result = await delete_file(store, "uploads/1-a.txt", sleep=RecordingSleep())

    assert result.existed is None
    assert result.verified is True
    assert result.attempts == 1


@pytest.mark.anyio
async def test_deleting_a_missing_file_still_calls_the_store(store):
    result = await delete_file(store, "uploads/404-missing.txt", sleep=RecordingSleep())

    assert result.existed is False
    assert result.verified is True
    assert store.calls_of("delete") == ["uploads/404-missing.txt"]


@pytest.mark.anyio
async def test_delete_failure_is_reported_without_verification(store):
    store.add("uploads/1-a.txt")
    store.fail_delete = True
    sleep = RecordingSleep()

    with pytest.raises(DeleteFailedError) as excinfo:
        await delete_file(store, "uploads/1-a.txt", sleep=sleep)

    assert "delete rejected" in excinfo.value.details
    assert sleep.delays == []


@pytest.mark.anyio
async def test_verification_can_be_skipped(store):
    store.add("uploads/1-a.txt")
    store.lingering_heads = 10
    sleep = RecordingSleep()

    result = await delete_file(store, "uploads/1-a.txt", verify=False, sleep=sleep)

    assert result.verified is False
    assert result.attempts == 0
    assert sleep.delays == []
    assert store.calls_of("head") == ["uploads/1-a.txt"]


@pytest.mark.anyio
async def test_second_delete_of_same_id_succeeds_without_affecting_first(store):
    store.add("uploads/1-a.txt")

    first = await delete_file(store, "uploads/1-a.txt", sleep=RecordingSleep())
    second = await delete_file(store, "uploads/1-a.txt", sleep=RecordingSleep())

    assert first.verified is True and first.existed is True
    assert second.verified is True and second.existed is False
