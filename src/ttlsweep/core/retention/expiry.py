# src/ttlsweep/core/retention/expiry.py
"""Expiry query: which records have outlived the TTL.

The batch limit keeps each sweep cycle's latency and store load flat no
matter how large the backlog grows. Ordering within a batch is whatever
the store returns.
"""

from datetime import datetime, timedelta

import structlog

from ttlsweep.contracts.records import ExpirableRecord
from ttlsweep.contracts.stores import MetadataStore

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 10


def cutoff_for(now: datetime, ttl: timedelta) -> datetime:
    """Return the expiry cutoff: records created at or before it are expired."""
    return now - ttl


class ExpiryQuery:
    """Bounded lookup of expired records against the metadata store."""

    def __init__(self, metadata_store: MetadataStore, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """Initialize ExpiryQuery.

        Args:
            metadata_store: Store that tracks record creation times
            batch_size: Default upper bound on records per lookup

        Raises:
            ValueError: If batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._metadata_store = metadata_store
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def find_expired(self, cutoff: datetime, max_count: int | None = None) -> list[ExpirableRecord]:
        """Find at most max_count records created at or before cutoff.

        Args:
            cutoff: now - TTL
            max_count: Batch limit (defaults to the configured batch size)

        Returns:
            Expired records; empty when nothing is expired

        Raises:
            Exception: Whatever the metadata store raises when the lookup fails
        """
        limit = self._batch_size if max_count is None else max_count
        if limit <= 0:
            return []

        records = list(self._metadata_store.lookup_expired(cutoff, limit))

        if len(records) > limit:
            logger.warning(
                "Metadata store returned more records than requested",
                requested=limit,
                returned=len(records),
            )
            records = records[:limit]

        return records
