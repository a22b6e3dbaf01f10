# tests/property/core/test_expiry_properties.py
"""Property-based tests for the expiry predicate and batch bound.

Expiry Properties:
- A record is returned iff its age >= TTL (age == TTL is included)
- A lookup never returns more than the batch limit
- Every returned record satisfies the predicate, whatever the backlog size

Each example builds a fresh in-memory SQL metadata store so the real
SQL predicate is exercised, not a test double.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from ttlsweep.core.metadata import MetadataDB, SQLMetadataStore
from ttlsweep.core.retention import ExpiryQuery, cutoff_for

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

ttl_seconds_strategy = st.integers(min_value=1, max_value=30 * 86400)

# Offsets from the TTL boundary, in microseconds, biased toward the edge
boundary_offsets = st.one_of(
    st.sampled_from([-1, 0, 1]),
    st.integers(min_value=-(10**12), max_value=10**12),
)


@given(ttl_seconds=ttl_seconds_strategy, offsets=st.lists(boundary_offsets, min_size=1, max_size=20))
@settings(max_examples=50)
def test_record_expired_iff_age_at_least_ttl(ttl_seconds: int, offsets: list[int]) -> None:
    ttl = timedelta(seconds=ttl_seconds)
    with MetadataDB.in_memory() as db:
        store = SQLMetadataStore(db)
        expected: set[str] = set()
        for i, offset in enumerate(offsets):
            age = ttl + timedelta(microseconds=offset)
            record_id = f"r{i}"
            store.insert_record(record_id, f"b{i}", NOW - age)
            if age >= ttl:
                expected.add(record_id)

        found = ExpiryQuery(store, batch_size=len(offsets)).find_expired(cutoff_for(NOW, ttl))

        assert {r.record_id for r in found} == expected


@given(
    expired_count=st.integers(min_value=0, max_value=40),
    fresh_count=st.integers(min_value=0, max_value=10),
    batch_size=st.integers(min_value=1, max_value=15),
)
@settings(max_examples=50)
def test_lookup_never_exceeds_batch(expired_count: int, fresh_count: int, batch_size: int) -> None:
    ttl = timedelta(hours=1)
    with MetadataDB.in_memory() as db:
        store = SQLMetadataStore(db)
        for i in range(expired_count):
            store.insert_record(f"old{i}", f"b-old{i}", NOW - timedelta(hours=2, seconds=i))
        for i in range(fresh_count):
            store.insert_record(f"new{i}", f"b-new{i}", NOW - timedelta(minutes=30, seconds=i))

        found = ExpiryQuery(store, batch_size=batch_size).find_expired(cutoff_for(NOW, ttl))

        assert len(found) == min(batch_size, expired_count)
        assert all(r.record_id.startswith("old") for r in found)
