"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError: Base exception for sync errors
- StaleSessionError: Conflict choice made against a replaced session
- Conflict: Local/remote pair that diverged in one cycle
- MergeResult: Output of the merge engine
- SyncTrigger: What started a cycle (timer tick or manual request)
- SyncOutcome, SyncReport: How a cycle ended
- OrchestratorStats: Counters kept by the orchestrator
- Type aliases for callbacks
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto

from quotesync.client.records import QuoteRecord


class SyncError(Exception):
    """Base exception for sync errors."""


class StaleSessionError(SyncError):
    """A conflict choice was made for a session that has since been replaced."""


@dataclass(frozen=True)
class Conflict:
    """A local and a remote record sharing a merge key but differing.

    Attributes:
        local: The local record as it was before the merge.
        remote: The remote record that replaced it.
    """

    local: QuoteRecord
    remote: QuoteRecord

    @property
    def key(self) -> str:
        """Merge key shared by both sides."""
        return self.remote.key


@dataclass
class MergeResult:
    """Result of merging a remote batch into a local collection."""

    merged: list[QuoteRecord]
    conflicts: list[Conflict]
    changed: bool

    @property
    def has_conflicts(self) -> bool:
        """Check if there are any conflicts."""
        return len(self.conflicts) > 0


class SyncTrigger(Enum):
    """Origin of a sync cycle request."""

    TIMER = auto()
    MANUAL = auto()


class SyncOutcome(Enum):
    """How a sync cycle ended."""

    SKIPPED_EMPTY = auto()  # Fetch returned nothing
    UP_TO_DATE = auto()  # Merge found nothing to change
    SYNCED = auto()  # Committed without conflicts
    CONFLICTS = auto()  # Committed, remote applied over conflicting locals
    BUSY = auto()  # Rejected: another cycle was in progress
    FAILED = auto()  # Unexpected error, nothing committed


@dataclass
class SyncReport:
    """Summary of one sync cycle.

    Attributes:
        trigger: What started the cycle.
        outcome: How it ended.
        fetched: Number of remote records received.
        added: Number of records appended by the merge.
        conflicts: Conflicts detected in this cycle.
        started_at: Unix timestamp when the cycle started.
        error: Error message if the cycle failed.
    """

    trigger: SyncTrigger
    outcome: SyncOutcome
    fetched: int = 0
    added: int = 0
    conflicts: list[Conflict] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    error: str | None = None

    @property
    def changed(self) -> bool:
        """Check if the cycle committed anything."""
        return self.outcome in (SyncOutcome.SYNCED, SyncOutcome.CONFLICTS)

    @property
    def has_conflicts(self) -> bool:
        """Check if there are any conflicts."""
        return len(self.conflicts) > 0


@dataclass
class OrchestratorStats:
    """Statistics for the orchestrator."""

    cycles_run: int = 0
    cycles_skipped: int = 0
    cycles_up_to_date: int = 0
    triggers_rejected: int = 0
    records_added: int = 0
    conflicts_detected: int = 0
    errors: int = 0


# Type aliases for presentation-layer callbacks
ConflictCallback = Callable[[list[Conflict]], None]
RefreshCallback = Callable[[list[str]], None]
