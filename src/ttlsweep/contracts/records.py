# src/ttlsweep/contracts/records.py
"""Record types exchanged between the metadata store and the sweeper."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ExpirableRecord:
    """The unit of cleanup.

    The sweeper never sees a record's age: the metadata store tracks
    creation time and only hands back records that already qualify.
    """

    record_id: str  # Key of the metadata row
    blob_id: str  # Reference to the payload in the blob store


@dataclass
class SweepResult:
    """Summary of one sweep cycle.

    found_count is the number of records the expiry query returned, which
    is the number of deletions attempted. Individual deletion failures are
    not counted here; they are only visible through logging.
    """

    cutoff: datetime
    found_count: int
    query_failed: bool
    duration_seconds: float
