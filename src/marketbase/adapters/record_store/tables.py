"""Record store schema.

Two tables hold every collection definition and every record:

| Table         | Row                                                         |
|---------------|-------------------------------------------------------------|
| `collections` | one collection: unique name, field list and rules as JSON  |
| `records`     | one record: owning collection id and the field values as JSON |

Constraints (enforced here):

| Constraint                          | Purpose                                 |
|-------------------------------------|-----------------------------------------|
| UNIQUE(collections.name)            | collections are looked up by name       |
| FK records.collection_id ON DELETE CASCADE | records go away with their collection |

The marketplace schema itself (shops, products, ...) lives in the `fields`
JSON of `collections`, not in DDL; it is managed by the reconciler.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Table, text

from marketbase.adapters.db.metadata import metadata
from marketbase.adapters.db.sa_types import PORTABLE_JSON, UTCDateTime

__all__ = ["collections", "records"]

ID_LENGTH = 32

collections = Table(
    "collections",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True, comment="Collection identifier."),
    Column(
        "name",
        String(100),
        nullable=False,
        unique=True,
        comment="Human-readable, unique collection name.",
    ),
    Column(
        "system",
        Boolean,
        nullable=False,
        server_default=text("false"),
        comment="System collections cannot be deleted.",
    ),
    Column("fields", PORTABLE_JSON, nullable=False, comment="Ordered field list."),
    Column("rules", PORTABLE_JSON, nullable=False, comment="Access rules."),
    Column(
        "created_at",
        UTCDateTime(),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    comment="Collection definitions.",
)

records = Table(
    "records",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True, comment="Record identifier."),
    Column(
        "collection_id",
        String(ID_LENGTH),
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("data", PORTABLE_JSON, nullable=False, comment="Field values."),
    Column(
        "created_at",
        UTCDateTime(),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    Index("ix_records_collection_id", "collection_id"),
    comment="Records of every collection.",
)
