"""Sync orchestrator for reconciling local quotes with the remote source.

This module provides:
- SyncOrchestrator: Drives fetch -> merge -> commit cycles
- GatewayProtocol: What the orchestrator needs from a remote gateway

State machine:
    IDLE --(timer tick | manual request)--> FETCHING
    FETCHING --(batch empty)--> SKIPPED_EMPTY --> IDLE
    FETCHING --(batch non-empty)--> MERGING
    MERGING --(nothing changed)--> IDLE
    MERGING --(changed)--> COMMITTING --> IDLE

Both triggers go through run_cycle(). Only one cycle runs at a time: a
trigger received while a cycle is in progress is rejected with a BUSY
report. Fetching happens outside the store lock; snapshot, merge and commit
happen under it, so concurrent add/import calls are never lost and a merge
result is never partially committed.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from quotesync.client.notifications import (
    NotificationSink,
    notify_busy,
    notify_conflicts,
    notify_error,
    notify_sync_skipped,
    notify_synced,
    notify_up_to_date,
)
from quotesync.client.sync.conflicts import ConflictSession
from quotesync.client.sync.merge import merge
from quotesync.client.sync.types import (
    ConflictCallback,
    OrchestratorStats,
    RefreshCallback,
    SyncOutcome,
    SyncReport,
    SyncTrigger,
)
from quotesync.core.types import SyncState

if TYPE_CHECKING:
    from quotesync.client.records import QuoteRecord
    from quotesync.client.store import RecordStore

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "quote_sync"


class GatewayProtocol(Protocol):
    """Protocol for remote gateways.

    Gateways must never raise for transport problems; an unreachable or
    misbehaving remote yields an empty batch.
    """

    def fetch_batch(self, limit: int) -> list[QuoteRecord]:
        """Fetch up to ``limit`` remote records."""
        ...


class SyncOrchestrator:
    """Runs sync cycles on demand or on a timer.

    Usage:
        orchestrator = SyncOrchestrator(store, gateway)
        orchestrator.set_on_conflicts(show_conflicts)

        # Manual request
        report = orchestrator.run_cycle(SyncTrigger.MANUAL)

        # Periodic sync
        orchestrator.start(interval=60.0)
        ...
        orchestrator.stop()
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: GatewayProtocol,
        session: ConflictSession | None = None,
        fetch_limit: int = 5,
        notify: NotificationSink | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Record store owning the collection.
            gateway: Remote gateway to fetch from.
            session: Conflict session to fill (created if omitted).
            fetch_limit: Maximum remote records per cycle.
            notify: Sink for user-facing notices (defaults to the log).
        """
        self._store = store
        self._gateway = gateway
        self._session = session or ConflictSession(store)
        self._fetch_limit = fetch_limit
        self._notify = notify

        # State
        self._state = SyncState.IDLE
        self._state_lock = threading.Lock()
        self._cycle_lock = threading.Lock()

        # Timer
        self._scheduler: BackgroundScheduler | None = None

        # Stats
        self._stats = OrchestratorStats()

        # Callbacks
        self._on_conflicts: ConflictCallback | None = None
        self._on_refresh: RefreshCallback | None = None

    @property
    def state(self) -> SyncState:
        """Get current orchestrator state."""
        with self._state_lock:
            return self._state

    @property
    def stats(self) -> OrchestratorStats:
        """Get orchestrator statistics."""
        return self._stats

    @property
    def session(self) -> ConflictSession:
        """Conflict session filled by conflicting cycles."""
        return self._session

    @property
    def is_busy(self) -> bool:
        """Check if a cycle is in progress."""
        return self._cycle_lock.locked()

    @property
    def is_running(self) -> bool:
        """Check if the periodic timer is active."""
        return self._scheduler is not None

    def set_on_conflicts(self, callback: ConflictCallback) -> None:
        """Set callback invoked with the conflict list after a conflicting commit."""
        self._on_conflicts = callback

    def set_on_refresh(self, callback: RefreshCallback) -> None:
        """Set callback invoked with the category list after every commit."""
        self._on_refresh = callback

    def _set_state(self, state: SyncState) -> None:
        with self._state_lock:
            if self._state != state:
                logger.debug("Sync state: %s -> %s", self._state.value, state.value)
            self._state = state

    # === Cycle ===

    def run_cycle(self, trigger: SyncTrigger = SyncTrigger.MANUAL) -> SyncReport:
        """Run one sync cycle.

        Args:
            trigger: What requested the cycle.

        Returns:
            SyncReport describing the outcome. BUSY if another cycle was
            already running.
        """
        if not self._cycle_lock.acquire(blocking=False):
            self._stats.triggers_rejected += 1
            logger.info("Sync already in progress, ignoring %s trigger", trigger.name)
            notify_busy(self._notify)
            return SyncReport(trigger=trigger, outcome=SyncOutcome.BUSY)

        try:
            return self._run(trigger)
        except Exception as e:
            self._stats.errors += 1
            logger.exception("Sync cycle failed")
            notify_error(str(e), self._notify)
            return SyncReport(trigger=trigger, outcome=SyncOutcome.FAILED, error=str(e))
        finally:
            self._set_state(SyncState.IDLE)
            self._cycle_lock.release()

    def _run(self, trigger: SyncTrigger) -> SyncReport:
        self._stats.cycles_run += 1
        logger.info("Starting sync cycle (%s)", trigger.name)

        self._set_state(SyncState.FETCHING)
        batch = self._gateway.fetch_batch(self._fetch_limit)

        if not batch:
            self._set_state(SyncState.SKIPPED_EMPTY)
            self._stats.cycles_skipped += 1
            logger.info("Sync skipped: no remote quotes")
            notify_sync_skipped(self._notify)
            return SyncReport(trigger=trigger, outcome=SyncOutcome.SKIPPED_EMPTY)

        self._set_state(SyncState.MERGING)
        with self._store.locked() as store:
            snapshot = list(store.records)
            result = merge(snapshot, batch)

            if not result.changed:
                self._stats.cycles_up_to_date += 1
                logger.info("Sync: already up to date")
                notify_up_to_date(self._notify)
                return SyncReport(
                    trigger=trigger,
                    outcome=SyncOutcome.UP_TO_DATE,
                    fetched=len(batch),
                )

            self._set_state(SyncState.COMMITTING)
            store.replace_all(result.merged)
            if result.has_conflicts:
                self._session.open(result.conflicts, snapshot)
            else:
                # A newer commit supersedes the previous snapshot
                self._session.clear()
            categories = store.categories()

        added = len(result.merged) - len(snapshot)
        self._stats.records_added += added
        self._stats.conflicts_detected += len(result.conflicts)
        logger.info(
            "Sync committed: %d fetched, %d added, %d conflict(s)",
            len(batch),
            added,
            len(result.conflicts),
        )

        if self._on_refresh:
            self._on_refresh(categories)

        if result.has_conflicts:
            notify_conflicts(len(result.conflicts), self._notify)
            if self._on_conflicts:
                self._on_conflicts(list(result.conflicts))
            outcome = SyncOutcome.CONFLICTS
        else:
            notify_synced(added, self._notify)
            outcome = SyncOutcome.SYNCED

        return SyncReport(
            trigger=trigger,
            outcome=outcome,
            fetched=len(batch),
            added=added,
            conflicts=list(result.conflicts),
        )

    # === Timer ===

    def _timer_job(self) -> None:
        """Job function for the periodic sync."""
        report = self.run_cycle(SyncTrigger.TIMER)
        logger.debug("Timer sync finished: %s", report.outcome.name)

    def start(self, interval: float = 60.0, run_immediately: bool = False) -> None:
        """Start the periodic sync timer.

        Args:
            interval: Seconds between cycles.
            run_immediately: Also run a cycle right away.
        """
        if self._scheduler is not None:
            logger.warning("Sync timer already running")
            return

        # next_run_time=None would add the job paused, so only pass it when set
        extra = {"next_run_time": datetime.now()} if run_immediately else {}

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self._timer_job,
            trigger=IntervalTrigger(seconds=interval),
            id=SYNC_JOB_ID,
            name="Periodic quote sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **extra,
        )
        self._scheduler.start()
        logger.info("Sync timer started (every %.0fs)", interval)

    def stop(self) -> None:
        """Stop the periodic sync timer."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Sync timer stopped")
