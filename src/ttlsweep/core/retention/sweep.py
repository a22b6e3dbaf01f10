# src/ttlsweep/core/retention/sweep.py
"""One sweep cycle: query a bounded batch of expired records, delete each."""

from datetime import timedelta
from time import perf_counter

import structlog

from ttlsweep.contracts.records import SweepResult
from ttlsweep.core.clock import DEFAULT_CLOCK, Clock
from ttlsweep.core.retention.deleter import RecordDeleter, log_store_failure
from ttlsweep.core.retention.expiry import ExpiryQuery, cutoff_for

logger = structlog.get_logger(__name__)


class SweepCycle:
    """Runs a single expiry pass on the calling thread.

    Deletions within a cycle are sequential. Concurrent cycles on other
    workers operate on their own query results and need no coordination.
    A short batch is not a "caught up" signal; scheduling is fixed-interval.
    """

    def __init__(
        self,
        query: ExpiryQuery,
        deleter: RecordDeleter,
        *,
        ttl: timedelta,
        clock: Clock = DEFAULT_CLOCK,
        log_errors: bool = False,
    ) -> None:
        """Initialize SweepCycle.

        Args:
            query: Expiry query bound to the metadata store
            deleter: Record deleter bound to both stores
            ttl: Retention window
            clock: Wall clock for computing the cutoff
            log_errors: Log query failures at WARNING instead of DEBUG
        """
        self._query = query
        self._deleter = deleter
        self._ttl = ttl
        self._clock = clock
        self._log_errors = log_errors

    def run_once(self) -> SweepResult:
        """Run one pass.

        On query failure the cycle aborts with no deletions; the next tick
        retries from scratch.
        """
        start_time = perf_counter()
        cutoff = cutoff_for(self._clock.now(), self._ttl)

        try:
            expired = self._query.find_expired(cutoff)
        except Exception as e:
            log_store_failure(
                self._log_errors,
                "Error finding expired records",
                cutoff=cutoff.isoformat(),
                error=str(e),
            )
            return SweepResult(
                cutoff=cutoff,
                found_count=0,
                query_failed=True,
                duration_seconds=perf_counter() - start_time,
            )

        for record in expired:
            self._deleter.delete(record)

        duration_seconds = perf_counter() - start_time
        if expired:
            logger.info(
                "Sweep cycle processed expired records",
                count=len(expired),
                cutoff=cutoff.isoformat(),
                duration_seconds=round(duration_seconds, 3),
            )

        return SweepResult(
            cutoff=cutoff,
            found_count=len(expired),
            query_failed=False,
            duration_seconds=duration_seconds,
        )
