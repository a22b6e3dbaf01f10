# src/ttlsweep/core/retention/deleter.py
"""Best-effort deletion of one record from both stores.

The blob store and the metadata store are independent failure domains:
- A stuck or missing blob must never block removal of its metadata row,
  otherwise the backlog grows without bound.
- A metadata failure must never suppress blob deletion, otherwise storage
  leaks.

A blob is only deleted once no other row points at it. Content-addressed
blob stores deduplicate payloads, so an expired record may share its blob
with a record that has not expired.

Failures are terminal for the record in this pass. The record still
satisfies the expiry predicate, so the next sweep rediscovers it.
"""

from typing import Any

import structlog

from ttlsweep.contracts.records import ExpirableRecord
from ttlsweep.contracts.stores import BlobStore, MetadataStore

logger = structlog.get_logger(__name__)


def log_store_failure(enabled: bool, event: str, **fields: Any) -> None:
    """Log a swallowed store failure.

    WARNING when deletion error logging is enabled, DEBUG otherwise.
    """
    if enabled:
        logger.warning(event, **fields)
    else:
        logger.debug(event, **fields)


class RecordDeleter:
    """Deletes a record's blob, then its metadata row."""

    def __init__(
        self,
        blob_store: BlobStore,
        metadata_store: MetadataStore,
        *,
        log_deletion_errors: bool = False,
    ) -> None:
        self._blob_store = blob_store
        self._metadata_store = metadata_store
        self._log_deletion_errors = log_deletion_errors

    def delete(self, record: ExpirableRecord) -> None:
        """Delete the record from both stores, tolerating either failure.

        Blob deletion always runs before the metadata deletion attempt. A blob
        still referenced by another row is left in place; the last record
        swept for it removes it. Nothing is returned and nothing is raised for
        store failures.
        """
        if not self._blob_shared(record):
            try:
                self._blob_store.delete_blob(record.blob_id)
            except Exception as e:
                log_store_failure(
                    self._log_deletion_errors,
                    "Error deleting blob",
                    blob_id=record.blob_id,
                    record_id=record.record_id,
                    error=str(e),
                )

        # Attempt the row even if blob deletion failed
        try:
            self._metadata_store.delete_record(record.record_id)
        except Exception as e:
            log_store_failure(
                self._log_deletion_errors,
                "Error deleting record",
                record_id=record.record_id,
                error=str(e),
            )

    def _blob_shared(self, record: ExpirableRecord) -> bool:
        try:
            shared = self._metadata_store.blob_referenced_elsewhere(record.blob_id, record.record_id)
        except Exception as e:
            log_store_failure(
                self._log_deletion_errors,
                "Error checking blob references",
                blob_id=record.blob_id,
                record_id=record.record_id,
                error=str(e),
            )
            # Sharing unknown: keep the blob
            return True

        if shared:
            logger.debug(
                "Blob still referenced by another record, keeping it",
                blob_id=record.blob_id,
                record_id=record.record_id,
            )
        return shared
