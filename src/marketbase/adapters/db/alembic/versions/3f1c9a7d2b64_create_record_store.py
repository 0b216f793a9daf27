"""create record store tables

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-19 09:12:44.517302

"""

# pylint: disable=invalid-name

import json
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import context, op

from marketbase.adapters.db.sa_types import PORTABLE_JSON, UTCDateTime

# deal with alembic stuff
# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b64"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _text(name: str, required: bool = False) -> dict:
    return {
        "name": name,
        "kind": "text",
        "required": required,
        "collection_id": None,
        "max_select": None,
        "cascade_delete": False,
        "max_size": None,
        "mime_types": [],
    }


ADMIN_ONLY = {
    "list_rule": None,
    "view_rule": None,
    "create_rule": None,
    "update_rule": None,
    "delete_rule": None,
}


def upgrade() -> None:
    """Upgrade schema."""

    collections = op.create_table(
        "collections",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "system", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("fields", PORTABLE_JSON, nullable=False),
        sa.Column("rules", PORTABLE_JSON, nullable=False),
        sa.Column(
            "created_at",
            UTCDateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_collections")),
        sa.UniqueConstraint("name", name=op.f("uq_collections_name")),
        comment="Collection definitions.",
    )
    op.create_table(
        "records",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("collection_id", sa.String(length=32), nullable=False),
        sa.Column("data", PORTABLE_JSON, nullable=False),
        sa.Column(
            "created_at",
            UTCDateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["collection_id"],
            ["collections.id"],
            name=op.f("fk_records_collection_id_collections"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_records")),
        comment="Records of every collection.",
    )
    op.create_index(
        op.f("ix_records_collection_id"), "records", ["collection_id"], unique=False
    )

    # system collections; ids must match marketbase.domain.schema
    seed_rows = [
        {
            "id": "_pb_users_auth_",
            "name": "users",
            "system": True,
            "fields": [_text("email", required=True), _text("name")],
            "rules": ADMIN_ONLY,
        },
        {
            "id": "_pb_superusers_",
            "name": "_superusers",
            "system": True,
            "fields": [
                _text("email", required=True),
                _text("password", required=True),
            ],
            "rules": ADMIN_ONLY,
        },
    ]
    if context.is_offline_mode():
        # JSON has no literal renderer; --sql output gets the payloads as text
        collections = sa.table(
            "collections",
            sa.column("id", sa.String),
            sa.column("name", sa.String),
            sa.column("system", sa.Boolean),
            sa.column("fields", sa.Text),
            sa.column("rules", sa.Text),
        )
        seed_rows = [
            {
                **row,
                "fields": json.dumps(row["fields"]),
                "rules": json.dumps(row["rules"]),
            }
            for row in seed_rows
        ]
    op.bulk_insert(collections, seed_rows)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index(op.f("ix_records_collection_id"), table_name="records")
    op.drop_table("records")
    op.drop_table("collections")
