"""Tests for the in-memory and SQLAlchemy entry gateways."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterator, List

import pytest
import sqlalchemy as sa
from sqlalchemy.pool import StaticPool

from backend.app.domain.entries import (
    CreateEntryRequest,
    CustomFieldInput,
    EntryConflictError,
    InMemoryEntryGateway,
    PostgresEntryGateway,
    build_tables,
)

pytestmark = [pytest.mark.entries]

T0 = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class StepClock:
    """Returns T0, T0+1m, T0+2m, ... on successive calls."""

    def __init__(self, start: datetime = T0) -> None:
        self._next = start

    def __call__(self) -> datetime:
        current = self._next
        self._next = current + timedelta(minutes=1)
        return current


def _request(email: str = "john@example.com", *pairs: tuple) -> CreateEntryRequest:
    return CreateEntryRequest(
        name="John Doe",
        email=email,
        phone="1234567890",
        message="Hello",
        custom_fields=tuple(CustomFieldInput(key=k, value=v) for k, v in pairs),
    )


@pytest.fixture()
def sqlite_engine() -> Iterator[sa.engine.Engine]:
    engine = sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @sa.event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    yield engine
    engine.dispose()


@pytest.fixture()
def sql_gateway(sqlite_engine) -> PostgresEntryGateway:
    tables = build_tables()
    tables.metadata.create_all(sqlite_engine)
    return PostgresEntryGateway(sqlite_engine, tables=tables, clock=StepClock())


@pytest.fixture(params=["memory", "sql"])
def gateway(request, sqlite_engine):
    if request.param == "memory":
        return InMemoryEntryGateway(clock=StepClock())
    tables = build_tables()
    tables.metadata.create_all(sqlite_engine)
    return PostgresEntryGateway(sqlite_engine, tables=tables, clock=StepClock())


def test_insert_assigns_ids_and_owns_custom_fields(gateway):
    entry = gateway.insert_entry(
        _request("john@example.com", ("company", "Acme"), ("role", "Engineer"))
    )

    assert entry.id
    assert entry.created_at == entry.updated_at == T0
    assert [(f.key, f.value) for f in entry.custom_fields] == [
        ("company", "Acme"),
        ("role", "Engineer"),
    ]
    assert {f.entry_id for f in entry.custom_fields} == {entry.id}
    assert len({f.id for f in entry.custom_fields}) == 2


def test_round_trip_by_id_and_email(gateway):
    entry = gateway.insert_entry(_request("john@example.com", ("company", "Acme")))

    by_id = gateway.find_by_id(entry.id)
    by_email = gateway.find_by_email("john@example.com")

    assert by_id is not None and by_email is not None
    assert by_id.id == by_email.id == entry.id
    assert by_id.name == "John Doe"
    assert by_id.phone == "1234567890"
    assert by_id.created_at == T0
    assert by_id.created_at.tzinfo is not None
    assert [(f.key, f.value) for f in by_id.custom_fields] == [("company", "Acme")]
    assert gateway.find_by_id("missing") is None
    assert gateway.find_by_email("nobody@example.com") is None


def test_find_all_returns_newest_first_with_children(gateway):
    first = gateway.insert_entry(_request("a@example.com", ("k", "1")))
    second = gateway.insert_entry(_request("b@example.com"))
    third = gateway.insert_entry(_request("c@example.com", ("x", "2"), ("y", "3")))

    entries = gateway.find_all()

    assert [entry.id for entry in entries] == [third.id, second.id, first.id]
    assert [f.key for f in entries[0].custom_fields] == ["x", "y"]
    assert entries[1].custom_fields == ()
    assert gateway.count_entries() == 3


def test_find_custom_fields_orders_by_key(gateway):
    entry = gateway.insert_entry(
        _request("john@example.com", ("role", "Engineer"), ("company", "Acme"), ("age", "30"))
    )

    fields = gateway.find_custom_fields(entry.id)

    assert [f.key for f in fields] == ["age", "company", "role"]
    # the entry itself keeps insertion order
    assert [f.key for f in gateway.find_by_id(entry.id).custom_fields] == [
        "role",
        "company",
        "age",
    ]
    assert gateway.find_custom_fields("unknown") == []


def test_duplicate_email_raises_conflict(gateway):
    gateway.insert_entry(_request("john@example.com"))

    with pytest.raises(EntryConflictError) as excinfo:
        gateway.insert_entry(_request("john@example.com", ("k", "v")))

    assert excinfo.value.email == "john@example.com"
    assert gateway.count_entries() == 1


def test_child_failure_rolls_back_entry(sql_gateway, sqlite_engine):
    request = CreateEntryRequest(
        name="John Doe",
        email="john@example.com",
        custom_fields=(
            CustomFieldInput(key="company", value="Acme"),
            CustomFieldInput(key="broken", value=None),  # violates NOT NULL
        ),
    )

    with pytest.raises(sa.exc.IntegrityError):
        sql_gateway.insert_entry(request)

    assert sql_gateway.count_entries() == 0
    assert sql_gateway.find_by_email("john@example.com") is None
    with sqlite_engine.connect() as conn:
        orphans = conn.execute(sa.text("SELECT COUNT(*) FROM custom_fields")).scalar_one()
    assert orphans == 0


def test_deleting_entry_cascades_to_custom_fields(sql_gateway, sqlite_engine):
    entry = sql_gateway.insert_entry(
        _request("john@example.com", ("company", "Acme"), ("role", "Engineer"))
    )

    with sqlite_engine.begin() as conn:
        conn.execute(sa.text("DELETE FROM entries WHERE id = :id"), {"id": entry.id})

    assert sql_gateway.find_custom_fields(entry.id) == []
    with sqlite_engine.connect() as conn:
        remaining = conn.execute(sa.text("SELECT COUNT(*) FROM custom_fields")).scalar_one()
    assert remaining == 0


def test_custom_field_requires_existing_entry(sql_gateway, sqlite_engine):
    with pytest.raises(sa.exc.IntegrityError):
        with sqlite_engine.begin() as conn:
            conn.execute(
                sa.text(
                    'INSERT INTO custom_fields (id, entry_id, "key", "value", position) '
                    "VALUES ('cf-1', 'missing', 'k', 'v', 0)"
                )
            )


def test_in_memory_ties_keep_latest_insert_first():
    fixed: List[datetime] = [T0]
    gateway = InMemoryEntryGateway(clock=lambda: fixed[0])

    first = gateway.insert_entry(_request("a@example.com"))
    second = gateway.insert_entry(_request("b@example.com"))

    assert [entry.id for entry in gateway.find_all()] == [second.id, first.id]
