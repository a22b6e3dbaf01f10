# src/ttlsweep/core/metadata/schema.py
"""SQLAlchemy table definitions for the metadata store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with multiple database backends.
"""

from sqlalchemy import Column, DateTime, Index, MetaData, String, Table

metadata = MetaData()

records_table = Table(
    "records",
    metadata,
    Column("record_id", String(64), primary_key=True),
    # Not unique: the blob store is content-addressed, identical payloads share a blob
    Column("blob_id", String(64), nullable=False),
    # Always UTC. SQLite stores naive text, so callers normalize before binding.
    Column("created_at", DateTime(timezone=True), nullable=False),
)

# Expiry lookups filter and order on created_at
Index("ix_records_created_at", records_table.c.created_at)
# Shared-blob checks before a blob is deleted
Index("ix_records_blob_id", records_table.c.blob_id)
