"""Create entries and custom_fields tables.

Revision ID: 20261019_create_entries
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_create_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("email", name="UQ_entries_email"),
    )
    op.create_index("IDX_entries_created_at", "entries", ["created_at"])

    op.create_table(
        "custom_fields",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "entry_id",
            sa.String(length=36),
            sa.ForeignKey("entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("key", sa.String(length=50), nullable=False),
        sa.Column("value", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("IDX_custom_fields_entry_id", "custom_fields", ["entry_id"])


def downgrade() -> None:
    op.drop_index("IDX_custom_fields_entry_id", table_name="custom_fields")
    op.drop_table("custom_fields")
    op.drop_index("IDX_entries_created_at", table_name="entries")
    op.drop_table("entries")
