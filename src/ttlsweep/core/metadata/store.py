# src/ttlsweep/core/metadata/store.py
"""SQL-backed metadata store.

Implements the MetadataStore protocol on top of MetadataDB. Timestamps
are normalized to UTC before binding because SQLite compares datetimes
as text.
"""

from datetime import UTC, datetime

from sqlalchemy import func, select

from ttlsweep.contracts.records import ExpirableRecord
from ttlsweep.core.metadata.database import MetadataDB
from ttlsweep.core.metadata.schema import records_table


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError(f"Expected a timezone-aware datetime, got naive {value!r}")
    return value.astimezone(UTC)


class SQLMetadataStore:
    """Record metadata rows in a SQL database."""

    def __init__(self, db: MetadataDB) -> None:
        """Initialize store.

        Args:
            db: Metadata database connection
        """
        self._db = db

    def insert_record(self, record_id: str, blob_id: str, created_at: datetime) -> ExpirableRecord:
        """Insert a record row. This is the ingestion seam used by tooling and tests.

        Raises:
            ValueError: If created_at is naive
            sqlalchemy.exc.IntegrityError: If record_id already exists
        """
        with self._db.connection() as conn:
            conn.execute(
                records_table.insert().values(
                    record_id=record_id,
                    blob_id=blob_id,
                    created_at=_as_utc(created_at),
                )
            )
        return ExpirableRecord(record_id=record_id, blob_id=blob_id)

    def lookup_expired(self, cutoff: datetime, max_count: int) -> list[ExpirableRecord]:
        """Find up to max_count records created at or before cutoff, oldest first.

        A record whose age equals the TTL exactly is expired, hence <=.
        """
        if max_count <= 0:
            return []

        query = (
            select(records_table.c.record_id, records_table.c.blob_id)
            .where(records_table.c.created_at <= _as_utc(cutoff))
            .order_by(records_table.c.created_at, records_table.c.record_id)
            .limit(max_count)
        )

        with self._db.connection() as conn:
            result = conn.execute(query)
            return [ExpirableRecord(record_id=row.record_id, blob_id=row.blob_id) for row in result]

    def delete_record(self, record_id: str) -> bool:
        """Delete a record row.

        Returns:
            True if a row was deleted, False if it was already gone
        """
        with self._db.connection() as conn:
            result = conn.execute(records_table.delete().where(records_table.c.record_id == record_id))
            return result.rowcount > 0

    def blob_referenced_elsewhere(self, blob_id: str, record_id: str) -> bool:
        """Whether a row other than record_id still points at blob_id."""
        query = (
            select(records_table.c.record_id)
            .where(records_table.c.blob_id == blob_id)
            .where(records_table.c.record_id != record_id)
            .limit(1)
        )
        with self._db.connection() as conn:
            return conn.execute(query).first() is not None

    def count_records(self) -> int:
        """Total number of record rows."""
        with self._db.connection() as conn:
            return int(conn.execute(select(func.count()).select_from(records_table)).scalar_one())

    def count_expired(self, cutoff: datetime) -> int:
        """Number of rows that currently satisfy the expiry predicate (the backlog)."""
        query = select(func.count()).select_from(records_table).where(records_table.c.created_at <= _as_utc(cutoff))
        with self._db.connection() as conn:
            return int(conn.execute(query).scalar_one())
