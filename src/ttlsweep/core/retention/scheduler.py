# src/ttlsweep/core/retention/scheduler.py
"""Sweeper: runs sweep cycles on a fixed interval from a pool of workers.

Lifecycle:
    UNINITIALIZED --start()--> RUNNING --stop()--> STOPPED
    UNINITIALIZED --start() with TTL 0--> DISABLED (inert)

There is no restart path. A stopped sweeper is discarded.

Thread model:
    - One ticker thread puts a tick into a single-slot queue every interval.
      A tick is consumed by exactly one worker. While the slot is full
      (every worker busy) further ticks are dropped, so a slow store never
      builds up a queue of catch-up sweeps.
    - N worker threads each block on the tick queue. Cancellation is a
      threading.Event seen by all workers and the ticker.
    - Workers check cancellation between waits only. A sweep cycle that has
      started always runs to completion.
    - Workers share nothing else. Concurrent cycles rely on the stores'
      own concurrency safety.
"""

import queue
import threading
import time
from enum import Enum

import structlog

from ttlsweep.contracts.records import SweepResult
from ttlsweep.contracts.stores import BlobStore, MetadataStore
from ttlsweep.core.clock import DEFAULT_CLOCK, Clock
from ttlsweep.core.config import SweeperSettings
from ttlsweep.core.retention.deleter import RecordDeleter
from ttlsweep.core.retention.expiry import ExpiryQuery
from ttlsweep.core.retention.sweep import SweepCycle

logger = structlog.get_logger(__name__)

# How long a worker blocks on the tick queue before re-checking cancellation
_WAIT_POLL_SECONDS = 0.1


class SweeperState(str, Enum):
    """Sweeper lifecycle states."""

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    DISABLED = "disabled"
    STOPPED = "stopped"


class SweeperStateError(Exception):
    """Raised on an invalid lifecycle transition (e.g. start() twice)."""

    pass


class Sweeper:
    """Background TTL expiry sweeper.

    Example:
        >>> sweeper = Sweeper(settings.sweeper, blob_store, metadata_store)
        >>> sweeper.start()
        >>> ...
        >>> sweeper.stop()
    """

    def __init__(
        self,
        settings: SweeperSettings,
        blob_store: BlobStore,
        metadata_store: MetadataStore,
        *,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        """Initialize the Sweeper.

        Args:
            settings: Retention and schedule configuration, read once
            blob_store: Store holding record payloads
            metadata_store: Store holding record rows and creation times
            clock: Wall clock used for cutoffs
        """
        self._settings = settings
        self._cycle = SweepCycle(
            ExpiryQuery(metadata_store, batch_size=settings.batch_size),
            RecordDeleter(
                blob_store,
                metadata_store,
                log_deletion_errors=settings.log_deletion_errors,
            ),
            ttl=settings.ttl,
            clock=clock,
            log_errors=settings.log_deletion_errors,
        )

        self._state = SweeperState.UNINITIALIZED
        self._state_lock = threading.Lock()

        # Broadcast to every worker and the ticker
        self._stop_event = threading.Event()
        # Exactly-once delivery of each tick to one worker
        self._ticks: queue.Queue[float] = queue.Queue(maxsize=1)

        self._ticker_thread: threading.Thread | None = None
        self._worker_threads: list[threading.Thread] = []

    @property
    def settings(self) -> SweeperSettings:
        return self._settings

    @property
    def state(self) -> SweeperState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SweeperState.RUNNING

    def start(self) -> None:
        """Start the ticker and worker threads.

        With TTL 0 the sweeper becomes DISABLED: no ticker, no workers.

        Raises:
            SweeperStateError: If the sweeper was already started or stopped
        """
        with self._state_lock:
            if self._state is not SweeperState.UNINITIALIZED:
                raise SweeperStateError(f"Cannot start sweeper in state '{self._state.value}'")

            if self._settings.disabled:
                logger.info("Configured TTL was 0; disabling sweeper")
                self._state = SweeperState.DISABLED
                return

            # Daemon threads: a host that never calls stop() can still exit
            self._ticker_thread = threading.Thread(
                target=self._tick_loop,
                name="ttlsweep-ticker",
                daemon=True,
            )
            self._worker_threads = [
                threading.Thread(
                    target=self._worker_loop,
                    args=(worker_id,),
                    name=f"ttlsweep-worker-{worker_id}",
                    daemon=True,
                )
                for worker_id in range(self._settings.workers)
            ]
            self._state = SweeperState.RUNNING

            for worker in self._worker_threads:
                worker.start()
            self._ticker_thread.start()

        logger.info(
            "Sweeper started",
            ttl_seconds=self._settings.ttl_seconds,
            interval_seconds=self._settings.interval_seconds,
            workers=self._settings.workers,
            batch_size=self._settings.batch_size,
        )

    def stop(self, *, wait: bool = True, timeout: float | None = None) -> None:
        """Signal cancellation and stop the ticker.

        Idempotent. On a disabled sweeper this does nothing; on a sweeper
        that was never started it only marks it STOPPED.

        Args:
            wait: Join the ticker and workers before returning. In-flight
                sweep cycles finish first.
            timeout: Overall join budget in seconds (None waits indefinitely)
        """
        with self._state_lock:
            if self._state in (SweeperState.DISABLED, SweeperState.STOPPED):
                return
            if self._state is SweeperState.UNINITIALIZED:
                self._state = SweeperState.STOPPED
                logger.debug("Sweeper stopped before it was started")
                return

            self._state = SweeperState.STOPPED
            self._stop_event.set()
            threads = [t for t in (self._ticker_thread, *self._worker_threads) if t is not None]

        # A pending tick must not start a cycle after stop
        try:
            self._ticks.get_nowait()
        except queue.Empty:
            pass

        if wait:
            deadline = None if timeout is None else time.monotonic() + timeout
            for thread in threads:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                thread.join(timeout=remaining)
            still_running = [t.name for t in threads if t.is_alive()]
            if still_running:
                logger.warning("Sweeper threads did not exit within timeout", threads=still_running)

        logger.info("Sweeper stopped")

    def run_once(self) -> SweepResult | None:
        """Run one sweep cycle synchronously on the calling thread.

        Returns:
            The cycle summary, or None when the TTL is the disabled sentinel
        """
        if self._settings.disabled:
            logger.info("Configured TTL was 0; skipping sweep")
            return None
        return self._cycle.run_once()

    def _tick_loop(self) -> None:
        """Ticker thread: deliver one tick per interval until cancelled."""
        interval = self._settings.interval_seconds
        # Event.wait returns True once stop() sets the event
        while not self._stop_event.wait(interval):
            try:
                self._ticks.put_nowait(time.monotonic())
            except queue.Full:
                logger.debug("Sweep tick dropped; all workers busy")

    def _worker_loop(self, worker_id: int) -> None:
        """Worker thread: run one sweep cycle per tick until cancelled."""
        while True:
            if self._stop_event.is_set():
                logger.debug("Sweep worker exiting", worker=worker_id)
                return

            try:
                self._ticks.get(timeout=_WAIT_POLL_SECONDS)
            except queue.Empty:
                continue

            # Tick consumed concurrently with stop()
            if self._stop_event.is_set():
                logger.debug("Sweep worker exiting", worker=worker_id)
                return

            try:
                self._cycle.run_once()
            except Exception as e:
                # A broken cycle must not kill the worker
                logger.error("Sweep cycle failed unexpectedly", worker=worker_id, error=str(e))

    def __enter__(self) -> "Sweeper":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.stop()
