# src/ttlsweep/core/metadata/__init__.py
"""Metadata store: record bookkeeping rows with creation timestamps."""

from ttlsweep.core.metadata.database import MetadataDB, SchemaCompatibilityError
from ttlsweep.core.metadata.schema import metadata, records_table
from ttlsweep.core.metadata.store import SQLMetadataStore

__all__ = [
    "MetadataDB",
    "SQLMetadataStore",
    "SchemaCompatibilityError",
    "metadata",
    "records_table",
]
