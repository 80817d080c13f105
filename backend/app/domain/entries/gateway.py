"""Entry persistence gateway implementations."""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import count
from threading import RLock
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from ...config import Settings, load_settings
from ...infra.db import get_engine
from ...infra.logging import get_logger
from .errors import EntryConflictError
from .models import CreateEntryRequest, CustomField, Entry, utcnow
from .tables import EntryTables, build_tables

__all__ = [
    "EntryGateway",
    "InMemoryEntryGateway",
    "PostgresEntryGateway",
    "build_entry_gateway",
]

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class EntryGateway(Protocol):  # pragma: no cover
    """Storage abstraction consumed by :class:`EntryService`."""

    def insert_entry(self, request: CreateEntryRequest) -> Entry: ...

    def find_all(self) -> List[Entry]: ...

    def find_by_id(self, entry_id: str) -> Optional[Entry]: ...

    def find_by_email(self, email: str) -> Optional[Entry]: ...

    def find_custom_fields(self, entry_id: str) -> List[CustomField]: ...

    def count_entries(self) -> int: ...


class InMemoryEntryGateway(EntryGateway):
    """Dict-backed store used for local development and tests."""

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._lock = RLock()
        self._clock = clock
        self._entries: Dict[str, Entry] = {}
        self._email_index: Dict[str, str] = {}
        self._sequence: Dict[str, int] = {}
        self._counter = count()

    def insert_entry(self, request: CreateEntryRequest) -> Entry:
        with self._lock:
            if request.email in self._email_index:
                raise EntryConflictError(request.email)
            entry = Entry.new(request, timestamp=self._clock())
            self._entries[entry.id] = entry
            self._email_index[entry.email] = entry.id
            self._sequence[entry.id] = next(self._counter)
        logger.debug(
            "entry_inserted",
            extra={"entry_id": entry.id, "custom_fields": len(entry.custom_fields)},
        )
        return entry

    def find_all(self) -> List[Entry]:
        with self._lock:
            records = list(self._entries.values())
            sequence = dict(self._sequence)
        records.sort(
            key=lambda entry: (entry.created_at, sequence[entry.id]),
            reverse=True,
        )
        return records

    def find_by_id(self, entry_id: str) -> Optional[Entry]:
        with self._lock:
            return self._entries.get(entry_id)

    def find_by_email(self, email: str) -> Optional[Entry]:
        with self._lock:
            entry_id = self._email_index.get(email)
            if entry_id is None:
                return None
            return self._entries[entry_id]

    def find_custom_fields(self, entry_id: str) -> List[CustomField]:
        with self._lock:
            entry = self._entries.get(entry_id)
        if entry is None:
            return []
        # sorted() is stable, so equal keys keep insertion order
        return sorted(entry.custom_fields, key=lambda item: item.key)

    def count_entries(self) -> int:
        with self._lock:
            return len(self._entries)


class PostgresEntryGateway(EntryGateway):
    """SQLAlchemy-backed adapter persisting entries relationally."""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        *,
        tables: Optional[EntryTables] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._engine = engine or get_engine()
        self._tables = tables or build_tables()
        self._entries = self._tables.entries
        self._custom_fields = self._tables.custom_fields
        self._clock = clock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert_entry(self, request: CreateEntryRequest) -> Entry:
        entry = Entry.new(request, timestamp=self._clock())
        entry_stmt = insert(self._entries).values(
            id=entry.id,
            name=entry.name,
            email=entry.email,
            phone=entry.phone,
            message=entry.message,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
        child_rows = [
            {
                "id": item.id,
                "entry_id": entry.id,
                "key": item.key,
                "value": item.value,
                "position": position,
            }
            for position, item in enumerate(entry.custom_fields)
        ]
        # One transaction: a failing child insert rolls back the entry row too.
        with self._engine.begin() as conn:
            try:
                conn.execute(entry_stmt)
            except IntegrityError as exc:
                logger.warning(
                    "entry_insert_integrity_error",
                    extra={"email": entry.email},
                )
                raise EntryConflictError(entry.email) from exc
            if child_rows:
                conn.execute(insert(self._custom_fields), child_rows)
        logger.debug(
            "entry_inserted",
            extra={"entry_id": entry.id, "custom_fields": len(child_rows)},
        )
        return entry

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find_all(self) -> List[Entry]:
        stmt = select(self._entries).order_by(self._entries.c.created_at.desc())
        with self._engine.begin() as conn:
            rows = conn.execute(stmt).mappings().all()
            children = self._fetch_children(conn, [row["id"] for row in rows])
        return [
            _row_to_entry(row, children.get(row["id"], [])) for row in rows
        ]

    def find_by_id(self, entry_id: str) -> Optional[Entry]:
        return self._find_one(self._entries.c.id == entry_id)

    def find_by_email(self, email: str) -> Optional[Entry]:
        return self._find_one(self._entries.c.email == email)

    def find_custom_fields(self, entry_id: str) -> List[CustomField]:
        c = self._custom_fields.c
        stmt = (
            select(self._custom_fields)
            .where(c.entry_id == entry_id)
            .order_by(c.key.asc(), c.position.asc())
        )
        with self._engine.begin() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_row_to_custom_field(row) for row in rows]

    def count_entries(self) -> int:
        stmt = select(func.count()).select_from(self._entries)
        with self._engine.begin() as conn:
            return int(conn.execute(stmt).scalar_one())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _find_one(self, condition) -> Optional[Entry]:
        stmt = select(self._entries).where(condition).limit(1)
        with self._engine.begin() as conn:
            row = conn.execute(stmt).mappings().first()
            if row is None:
                return None
            children = self._fetch_children(conn, [row["id"]])
        return _row_to_entry(row, children.get(row["id"], []))

    def _fetch_children(
        self, conn, entry_ids: Sequence[str]
    ) -> Dict[str, List[CustomField]]:
        if not entry_ids:
            return {}
        c = self._custom_fields.c
        stmt = (
            select(self._custom_fields)
            .where(c.entry_id.in_(list(entry_ids)))
            .order_by(c.entry_id, c.position.asc())
        )
        grouped: Dict[str, List[CustomField]] = {}
        for row in conn.execute(stmt).mappings():
            grouped.setdefault(row["entry_id"], []).append(_row_to_custom_field(row))
        return grouped


def build_entry_gateway(settings: Optional[Settings] = None) -> EntryGateway:
    """Factory that returns the configured gateway implementation."""

    settings = settings or load_settings()
    if settings.storage.backend == "memory":
        return InMemoryEntryGateway()
    try:
        engine = get_engine()
        if settings.storage.fallback_to_memory:
            with engine.connect():
                pass
        return PostgresEntryGateway(engine)
    except Exception:
        if not settings.storage.fallback_to_memory:
            raise
        logger.warning(
            "postgres_entry_store_unavailable_falling_back",
            exc_info=True,
        )
    return InMemoryEntryGateway()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_custom_field(row: Mapping[str, Any]) -> CustomField:
    return CustomField(
        id=row["id"],
        key=row["key"],
        value=row["value"],
        entry_id=row["entry_id"],
    )


def _row_to_entry(row: Mapping[str, Any], custom_fields: Sequence[CustomField]) -> Entry:
    return Entry(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone=row.get("phone"),
        message=row.get("message"),
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
        custom_fields=tuple(custom_fields),
    )
