# src/ttlsweep/core/retention/__init__.py
"""Retention management: the TTL expiry sweeper.

Components, leaf first:
- ExpiryQuery: bounded lookup of records past the cutoff
- RecordDeleter: best-effort deletion from both stores
- SweepCycle: one query-then-delete pass
- Sweeper: timer, worker threads and cooperative shutdown
"""

from ttlsweep.core.retention.deleter import RecordDeleter
from ttlsweep.core.retention.expiry import DEFAULT_BATCH_SIZE, ExpiryQuery, cutoff_for
from ttlsweep.core.retention.scheduler import Sweeper, SweeperState, SweeperStateError
from ttlsweep.core.retention.sweep import SweepCycle

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "ExpiryQuery",
    "RecordDeleter",
    "SweepCycle",
    "Sweeper",
    "SweeperState",
    "SweeperStateError",
    "cutoff_for",
]
