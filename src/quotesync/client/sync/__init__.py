"""Sync operations between the local collection and the remote source.

Architecture:
    Trigger (timer | manual) → SyncOrchestrator → RemoteGateway.fetch_batch
                             → merge → RecordStore.replace_all
                             → ConflictSession (if conflicts)

Components:
- **merge**: Pure merge engine, remote wins, conflicts reported
- **SyncOrchestrator**: State machine driving one cycle at a time
- **ConflictSession**: One-cycle-deep, all-or-nothing manual override
"""

from quotesync.client.sync.conflicts import ConflictSession
from quotesync.client.sync.merge import differs, merge
from quotesync.client.sync.orchestrator import GatewayProtocol, SyncOrchestrator
from quotesync.client.sync.types import (
    Conflict,
    ConflictCallback,
    MergeResult,
    OrchestratorStats,
    RefreshCallback,
    StaleSessionError,
    SyncError,
    SyncOutcome,
    SyncReport,
    SyncTrigger,
)

__all__ = [
    # Types and dataclasses
    "Conflict",
    "ConflictCallback",
    "MergeResult",
    "OrchestratorStats",
    "RefreshCallback",
    "StaleSessionError",
    "SyncError",
    "SyncOutcome",
    "SyncReport",
    "SyncTrigger",
    # Merge engine
    "differs",
    "merge",
    # Orchestration
    "GatewayProtocol",
    "SyncOrchestrator",
    # Conflict resolution
    "ConflictSession",
]
