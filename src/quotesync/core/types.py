"""Shared types for quotesync.

This module defines types and enums used across the client components.
"""

from __future__ import annotations

from enum import Enum


class SyncState(str, Enum):
    """State of the sync orchestrator.

    A cycle runs IDLE -> FETCHING -> MERGING -> COMMITTING -> IDLE.
    SKIPPED_EMPTY is entered when the fetch returned nothing and falls
    straight back to IDLE.
    """

    IDLE = "idle"
    FETCHING = "fetching"
    MERGING = "merging"
    COMMITTING = "committing"
    SKIPPED_EMPTY = "skipped_empty"
