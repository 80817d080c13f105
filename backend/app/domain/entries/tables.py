"""SQLAlchemy table definitions for entries and their custom fields."""

from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa

from .validation import (
    MAX_EMAIL_LENGTH,
    MAX_KEY_LENGTH,
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_VALUE_LENGTH,
)

ENTRIES_TABLE = "entries"
CUSTOM_FIELDS_TABLE = "custom_fields"


@dataclass(frozen=True)
class EntryTables:
    metadata: sa.MetaData
    entries: sa.Table
    custom_fields: sa.Table


def build_tables(metadata: sa.MetaData | None = None) -> EntryTables:
    """Declare both tables on ``metadata`` (a fresh one when omitted)."""

    metadata = metadata or sa.MetaData()
    entries = sa.Table(
        ENTRIES_TABLE,
        metadata,
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=MAX_NAME_LENGTH), nullable=False),
        sa.Column("email", sa.String(length=MAX_EMAIL_LENGTH), nullable=False),
        sa.Column("phone", sa.String(length=MAX_PHONE_LENGTH), nullable=True),
        sa.Column("message", sa.String(length=MAX_MESSAGE_LENGTH), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", name="UQ_entries_email"),
        sa.Index("IDX_entries_created_at", "created_at"),
    )
    custom_fields = sa.Table(
        CUSTOM_FIELDS_TABLE,
        metadata,
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "entry_id",
            sa.String(length=36),
            sa.ForeignKey(f"{ENTRIES_TABLE}.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("key", sa.String(length=MAX_KEY_LENGTH), nullable=False),
        sa.Column("value", sa.String(length=MAX_VALUE_LENGTH), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Index("IDX_custom_fields_entry_id", "entry_id"),
    )
    return EntryTables(metadata=metadata, entries=entries, custom_fields=custom_fields)
