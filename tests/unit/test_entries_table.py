"""Tests for the listing view model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import pytest

from backend.app.domain.entries.models import CustomField, Entry
from backend.app.presentation import (
    ApiClientError,
    CustomFieldCache,
    EntriesTable,
    RowState,
    format_date,
    truncate_text,
)

pytestmark = [pytest.mark.presentation]

CREATED = datetime(2026, 10, 19, 15, 4, tzinfo=timezone.utc)


def _entry(entry_id: str = "e1", **overrides) -> Entry:
    values = dict(
        id=entry_id,
        name="John Doe",
        email="john@example.com",
        phone=None,
        message=None,
        created_at=CREATED,
        updated_at=CREATED,
    )
    values.update(overrides)
    return Entry(**values)


class CountingFetcher:
    def __init__(self, fields=(), error: ApiClientError | None = None) -> None:
        self.calls: List[str] = []
        self._fields = list(fields)
        self._error = error

    def __call__(self, entry_id: str):
        self.calls.append(entry_id)
        if self._error is not None:
            raise self._error
        return self._fields


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("x" * 10, 10) == "x" * 10
    assert truncate_text("x" * 11, 10) == "x" * 10 + "..."


def test_format_date():
    assert format_date(CREATED) == "Oct 19, 2026, 03:04 PM"


def test_rows_start_collapsed():
    table = EntriesTable(CountingFetcher(), [_entry()])

    (row,) = table.rows()

    assert row.state is RowState.COLLAPSED
    assert row.custom_fields is None
    assert row.phone is None
    assert row.message is None


def test_long_values_are_truncated_with_full_title():
    long_name = "N" * 40
    long_message = "M" * 80
    table = EntriesTable(CountingFetcher(), [_entry(name=long_name, message=long_message)])

    (row,) = table.rows()

    assert row.name.text == "N" * 30 + "..."
    assert row.name.title == long_name
    assert row.message.text == "M" * 50 + "..."
    assert row.message.title == long_message
    assert row.submitted.text == "Oct 19, 2026, 03:04 PM"


def test_first_expand_fetches_and_later_toggles_use_cache():
    field = CustomField(id="cf1", key="company", value="Acme", entry_id="e1")
    fetcher = CountingFetcher([field])
    table = EntriesTable(fetcher, [_entry()])

    assert table.toggle_row("e1") is RowState.EXPANDED
    assert table.toggle_row("e1") is RowState.COLLAPSED
    assert table.toggle_row("e1") is RowState.EXPANDED

    assert fetcher.calls == ["e1"]
    assert table.custom_fields_for("e1") == (field,)
    assert table.rows()[0].custom_fields == (field,)


def test_rows_expand_independently():
    fetcher = CountingFetcher()
    table = EntriesTable(fetcher, [_entry("e1"), _entry("e2", email="b@example.com")])

    table.toggle_row("e2")

    assert not table.is_expanded("e1")
    assert table.is_expanded("e2")
    assert [row.state for row in table.rows()] == [RowState.COLLAPSED, RowState.EXPANDED]


def test_failed_fetch_expands_with_empty_list():
    fetcher = CountingFetcher(error=ApiClientError("Request failed"))
    table = EntriesTable(fetcher, [_entry()])

    assert table.toggle_row("e1") is RowState.EXPANDED
    assert table.custom_fields_for("e1") == ()

    table.toggle_row("e1")
    table.toggle_row("e1")
    assert fetcher.calls == ["e1"]


def test_prepend_keeps_newest_first():
    table = EntriesTable(CountingFetcher(), [_entry("old")])

    table.prepend(_entry("new", email="new@example.com"))

    assert [entry.id for entry in table.entries] == ["new", "old"]


def test_shared_cache_spans_tables():
    field = CustomField(id="cf1", key="company", value="Acme", entry_id="e1")
    fetcher = CountingFetcher([field])
    cache = CustomFieldCache()

    first = EntriesTable(fetcher, [_entry()], shared_cache=cache)
    first.toggle_row("e1")
    second = EntriesTable(fetcher, [_entry()], shared_cache=cache)

    assert second.toggle_row("e1") is RowState.EXPANDED
    assert second.custom_fields_for("e1") == (field,)
    assert fetcher.calls == ["e1"]


def test_failed_fetch_is_not_shared():
    cache = CustomFieldCache()
    failing = CountingFetcher(error=ApiClientError("Request failed"))
    EntriesTable(failing, [_entry()], shared_cache=cache).toggle_row("e1")

    field = CustomField(id="cf1", key="company", value="Acme", entry_id="e1")
    working = CountingFetcher([field])
    table = EntriesTable(working, [_entry()], shared_cache=cache)
    table.toggle_row("e1")

    assert cache.get("e1") == (field,)
    assert table.custom_fields_for("e1") == (field,)
    assert working.calls == ["e1"]
