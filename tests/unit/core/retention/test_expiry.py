"""Tests for the bounded expiry query."""

from datetime import UTC, datetime, timedelta

import pytest

from ttlsweep.contracts.records import ExpirableRecord
from ttlsweep.core.retention.expiry import DEFAULT_BATCH_SIZE, ExpiryQuery, cutoff_for
from tests.fixtures.stores import FakeMetadataStore

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class _OverReturningStore:
    """Store that ignores max_count."""

    def __init__(self, count: int) -> None:
        self._records = [ExpirableRecord(record_id=f"r{i}", blob_id=f"b{i}") for i in range(count)]

    def lookup_expired(self, cutoff: datetime, max_count: int) -> list[ExpirableRecord]:
        return list(self._records)

    def delete_record(self, record_id: str) -> bool:
        return True


def test_cutoff_for() -> None:
    assert cutoff_for(NOW, timedelta(hours=1)) == datetime(2024, 6, 1, 11, 0, tzinfo=UTC)


class TestExpiryQuery:
    def test_default_batch_size(self, fake_metadata_store: FakeMetadataStore) -> None:
        assert ExpiryQuery(fake_metadata_store).batch_size == DEFAULT_BATCH_SIZE == 10

    def test_invalid_batch_size(self, fake_metadata_store: FakeMetadataStore) -> None:
        with pytest.raises(ValueError, match="batch_size"):
            ExpiryQuery(fake_metadata_store, batch_size=0)

    def test_returns_empty_when_nothing_expired(self, fake_metadata_store: FakeMetadataStore) -> None:
        fake_metadata_store.add("r", "b", NOW)
        assert ExpiryQuery(fake_metadata_store).find_expired(NOW - timedelta(hours=1)) == []

    def test_returns_fewer_than_batch_when_backlog_small(self, fake_metadata_store: FakeMetadataStore) -> None:
        for i in range(3):
            fake_metadata_store.add(f"r{i}", f"b{i}", NOW - timedelta(days=1))
        assert len(ExpiryQuery(fake_metadata_store, batch_size=10).find_expired(NOW)) == 3

    def test_bounded_by_batch_size(self, fake_metadata_store: FakeMetadataStore) -> None:
        for i in range(25):
            fake_metadata_store.add(f"r{i}", f"b{i}", NOW - timedelta(days=1))
        assert len(ExpiryQuery(fake_metadata_store, batch_size=10).find_expired(NOW)) == 10

    def test_explicit_max_count_overrides_batch_size(self, fake_metadata_store: FakeMetadataStore) -> None:
        for i in range(5):
            fake_metadata_store.add(f"r{i}", f"b{i}", NOW - timedelta(days=1))
        assert len(ExpiryQuery(fake_metadata_store).find_expired(NOW, max_count=2)) == 2

    def test_non_positive_max_count_skips_store(self, fake_metadata_store: FakeMetadataStore) -> None:
        assert ExpiryQuery(fake_metadata_store).find_expired(NOW, max_count=0) == []
        assert fake_metadata_store.lookup_count == 0

    def test_truncates_store_that_over_returns(self) -> None:
        query = ExpiryQuery(_OverReturningStore(30), batch_size=10)
        assert len(query.find_expired(NOW)) == 10

    def test_store_errors_propagate(self, fake_metadata_store: FakeMetadataStore) -> None:
        fake_metadata_store.fail_lookup = ConnectionError("database unavailable")
        with pytest.raises(ConnectionError):
            ExpiryQuery(fake_metadata_store).find_expired(NOW)
