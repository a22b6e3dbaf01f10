# src/ttlsweep/contracts/__init__.py
"""Shared types and collaborator protocols.

Kept free of imports from ttlsweep.core so both the stores and the
retention components can depend on them without cycles.
"""

from ttlsweep.contracts.records import ExpirableRecord, SweepResult
from ttlsweep.contracts.stores import BlobStore, MetadataStore

__all__ = [
    "BlobStore",
    "ExpirableRecord",
    "MetadataStore",
    "SweepResult",
]
