# src/ttlsweep/contracts/stores.py
"""Protocols for the two stores the sweeper deletes from.

Implementations:
- core/blob_store.py (FilesystemBlobStore)
- core/metadata/store.py (SQLMetadataStore)

Both stores must tolerate concurrent independent calls and repeated
deletion of the same key; the sweeper does neither locking nor
deduplication across cycles.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ttlsweep.contracts.records import ExpirableRecord


@runtime_checkable
class BlobStore(Protocol):
    """Unstructured payload storage."""

    def delete_blob(self, blob_id: str) -> bool:
        """Delete a blob by id.

        Args:
            blob_id: Identifier of the blob

        Returns:
            True if the blob was deleted, False if it was already absent

        Raises:
            Exception: Any failure to reach or modify the store
        """
        ...


@runtime_checkable
class MetadataStore(Protocol):
    """Structured record bookkeeping with creation timestamps."""

    def lookup_expired(self, cutoff: datetime, max_count: int) -> list[ExpirableRecord]:
        """Find records created at or before cutoff.

        Args:
            cutoff: Timezone-aware datetime; records with created_at <= cutoff qualify
            max_count: Upper bound on the number of records returned

        Returns:
            At most max_count expired records, possibly empty

        Raises:
            Exception: If the lookup could not run
        """
        ...

    def delete_record(self, record_id: str) -> bool:
        """Delete a record's metadata row.

        Returns:
            True if a row was deleted, False if it was already absent
        """
        ...

    def blob_referenced_elsewhere(self, blob_id: str, record_id: str) -> bool:
        """Whether any row other than record_id still points at blob_id.

        Blob stores may deduplicate payloads, so one blob can back several
        records with different creation times.

        Raises:
            Exception: If the check could not run
        """
        ...
