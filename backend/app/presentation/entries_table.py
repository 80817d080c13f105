"""Listing view model with lazily expanded rows.

A row starts collapsed. The first expansion fetches that entry's custom
fields and caches them; later expand/collapse cycles read the cache. A failed
fetch caches an empty list so the row still opens. Tables built per request
can share a :class:`CustomFieldCache` so a row is fetched once per process.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..domain.entries.models import CustomField, Entry
from ..infra.logging import get_logger
from .api_client import ApiClientError

logger = get_logger(__name__)

NAME_DISPLAY_LENGTH = 30
EMAIL_DISPLAY_LENGTH = 35
MESSAGE_DISPLAY_LENGTH = 50

CustomFieldsFetcher = Callable[[str], Sequence[CustomField]]


class RowState(str, Enum):
    COLLAPSED = "collapsed"
    LOADING = "loading"
    EXPANDED = "expanded"


def truncate_text(text: str, max_length: int = 50) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_date(value: datetime) -> str:
    """Render ``value`` as e.g. ``Oct 19, 2026, 03:04 PM``."""

    return f"{value:%b} {value.day}, {value:%Y}, {value:%I:%M %p}"


@dataclass(frozen=True)
class DisplayText:
    """Possibly truncated text plus the full value for a tooltip."""

    text: str
    title: str

    @classmethod
    def of(cls, value: str, max_length: int) -> "DisplayText":
        return cls(text=truncate_text(value, max_length), title=value)


class CustomFieldCache:
    """Successful custom-field fetches shared across tables.

    Custom fields never change after their entry is created, so an entry id
    maps to one result for the life of the process. Failed fetches are not
    stored here; only the table that saw the failure remembers it.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._fields: Dict[str, Tuple[CustomField, ...]] = {}

    def get(self, entry_id: str) -> Optional[Tuple[CustomField, ...]]:
        with self._lock:
            return self._fields.get(entry_id)

    def put(self, entry_id: str, fields: Tuple[CustomField, ...]) -> None:
        with self._lock:
            self._fields[entry_id] = fields


@dataclass(frozen=True)
class EntryRowView:
    entry_id: str
    name: DisplayText
    email: DisplayText
    phone: Optional[str]
    message: Optional[DisplayText]
    submitted: DisplayText
    state: RowState
    custom_fields: Optional[Tuple[CustomField, ...]]

    @property
    def is_expanded(self) -> bool:
        return self.state is RowState.EXPANDED


class EntriesTable:
    """Tracks entries, per-row expansion and the custom-field cache."""

    def __init__(
        self,
        fetch_custom_fields: CustomFieldsFetcher,
        entries: Iterable[Entry] = (),
        shared_cache: Optional[CustomFieldCache] = None,
    ) -> None:
        self._fetch_custom_fields = fetch_custom_fields
        self._shared_cache = shared_cache
        self._entries: List[Entry] = list(entries)
        self._states: Dict[str, RowState] = {}
        self._cache: Dict[str, Tuple[CustomField, ...]] = {}

    @property
    def entries(self) -> List[Entry]:
        return list(self._entries)

    def set_entries(self, entries: Iterable[Entry]) -> None:
        self._entries = list(entries)

    def prepend(self, entry: Entry) -> None:
        self._entries.insert(0, entry)

    def row_state(self, entry_id: str) -> RowState:
        return self._states.get(entry_id, RowState.COLLAPSED)

    def is_expanded(self, entry_id: str) -> bool:
        return self.row_state(entry_id) is RowState.EXPANDED

    def custom_fields_for(self, entry_id: str) -> Optional[Tuple[CustomField, ...]]:
        return self._cache.get(entry_id)

    def toggle_row(self, entry_id: str) -> RowState:
        """Collapse an expanded row, or expand it (fetching on first use)."""

        if self.is_expanded(entry_id):
            self._states[entry_id] = RowState.COLLAPSED
            logger.debug("row_collapsed", extra={"entry_id": entry_id})
            return RowState.COLLAPSED
        if entry_id not in self._cache:
            self._states[entry_id] = RowState.LOADING
            self._cache[entry_id] = self._load(entry_id)
        self._states[entry_id] = RowState.EXPANDED
        logger.debug("row_expanded", extra={"entry_id": entry_id})
        return RowState.EXPANDED

    def rows(self) -> List[EntryRowView]:
        return [self._row_view(entry) for entry in self._entries]

    def _load(self, entry_id: str) -> Tuple[CustomField, ...]:
        if self._shared_cache is not None:
            cached = self._shared_cache.get(entry_id)
            if cached is not None:
                return cached
        logger.info("custom_fields_fetch_started", extra={"entry_id": entry_id})
        try:
            fields = tuple(self._fetch_custom_fields(entry_id))
        except ApiClientError as exc:
            logger.warning(
                "custom_fields_fetch_failed",
                extra={
                    "entry_id": entry_id,
                    "status": exc.status_code,
                    "error": exc.message,
                },
            )
            return tuple()
        if self._shared_cache is not None:
            self._shared_cache.put(entry_id, fields)
        return fields

    def _row_view(self, entry: Entry) -> EntryRowView:
        return EntryRowView(
            entry_id=entry.id,
            name=DisplayText.of(entry.name, NAME_DISPLAY_LENGTH),
            email=DisplayText.of(entry.email, EMAIL_DISPLAY_LENGTH),
            phone=entry.phone or None,
            message=DisplayText.of(entry.message, MESSAGE_DISPLAY_LENGTH)
            if entry.message
            else None,
            submitted=DisplayText(
                text=format_date(entry.created_at),
                title=entry.created_at.isoformat(),
            ),
            state=self.row_state(entry.id),
            custom_fields=self._cache.get(entry.id),
        )
