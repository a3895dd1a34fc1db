"""Tests for the list use case."""

from __future__ import annotations

from datetime import date, datetime, timezone

from app.application.use_cases.files import list_files, upload_file
from app.utils.datetime import resolve_timezone


def test_uploaded_file_lists_with_same_name_type_and_date(store):
    uploaded = upload_file(
        store,
        file_bytes=b"print('hi')",
        filename="my script.py",
        upload_date="2024-01-15",
        max_bytes=1024,
    )

    [listed] = list_files(store)

    assert listed.id == uploaded.id
    assert listed.name == "my_script.py"
    assert listed.type == "text/x-python"
    assert listed.uploaded_at == uploaded.uploaded_at
    assert listed.size == uploaded.size


def test_listing_falls_back_to_store_timestamp_and_extension_table(store):
    written = datetime(2024, 5, 2, 8, 30, tzinfo=timezone.utc)
    store.add("uploads/1714638600000-style.css", b"body{}", uploaded_at=written)
    store.add("uploads/readme.txt", b"hi", content_type="application/octet-stream")

    files = {item.id: item for item in list_files(store)}

    css = files["uploads/1714638600000-style.css"]
    assert css.name == "style.css"
    assert css.type == "text/css"
    assert css.uploaded_at == written
    assert files["uploads/readme.txt"].name == "readme.txt"
    assert files["uploads/readme.txt"].type == "text/plain"


def test_malformed_metadata_is_ignored(store):
    written = datetime(2024, 5, 2, tzinfo=timezone.utc)
    store.add(
        "uploads/1-a.txt",
        uploaded_at=written,
        metadata={"uploaded_at": "not a date"},
    )
    [listed] = list_files(store)
    assert listed.uploaded_at == written


def test_listing_is_newest_first_and_scoped_to_prefix(store):
    store.add("uploads/1-old.txt", uploaded_at=datetime(2023, 1, 1, tzinfo=timezone.utc))
    store.add("uploads/2-new.txt", uploaded_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    store.add("other/3-elsewhere.txt")

    names = [item.name for item in list_files(store)]

    assert names == ["new.txt", "old.txt"]
    assert store.calls_of("list") == ["uploads/"]


def test_day_filter_uses_requested_timezone(store):
    late_evening_utc = datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)
    store.add("uploads/1-late.txt", uploaded_at=late_evening_utc)
    store.add("uploads/2-other.txt", uploaded_at=datetime(2024, 1, 14, tzinfo=timezone.utc))

    in_utc = list_files(store, day=date(2024, 1, 15), tz=timezone.utc)
    in_utc_plus_nine = list_files(store, day=date(2024, 1, 16), tz=resolve_timezone("UTC+09:00"))

    assert [item.name for item in in_utc] == ["late.txt"]
    assert [item.name for item in in_utc_plus_nine] == ["late.txt"]
