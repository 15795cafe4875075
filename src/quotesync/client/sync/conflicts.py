"""Conflict resolution session.

Holds the conflicts of the most recent sync cycle together with the
collection as it was just before that cycle's commit. The remote version
is already applied by the commit; the user may either acknowledge it or
revert every conflicting record to its pre-merge local form. The choice
covers the whole conflict set; there is no per-conflict choice and no
history beyond one cycle.

Every opened or cleared session gets a new generation number. A caller
that showed the conflicts to the user passes that generation back with the
choice, so a choice is never applied to a session the user has not seen.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING

from quotesync.client.records import QuoteRecord
from quotesync.client.sync.types import Conflict, StaleSessionError

if TYPE_CHECKING:
    from quotesync.client.store import RecordStore

logger = logging.getLogger(__name__)


class ConflictSession:
    """Latest conflict set plus pre-merge snapshot, for manual override."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._conflicts: list[Conflict] = []
        self._snapshot: list[QuoteRecord] = []
        self._generation = 0

    @property
    def conflicts(self) -> list[Conflict]:
        """Conflicts of the most recent conflicting cycle."""
        with self._lock:
            return list(self._conflicts)

    @property
    def snapshot(self) -> list[QuoteRecord]:
        """Collection as it was before the most recent conflicting commit."""
        with self._lock:
            return list(self._snapshot)

    @property
    def is_open(self) -> bool:
        """Check if conflicts are waiting for review."""
        with self._lock:
            return bool(self._conflicts)

    def view(self) -> tuple[int, list[Conflict]]:
        """Current generation and its conflicts, read together.

        The generation is bumped by every open() and clear().
        """
        with self._lock:
            return self._generation, list(self._conflicts)

    def open(self, conflicts: Sequence[Conflict], snapshot: Sequence[QuoteRecord]) -> None:
        """Start a new session, superseding the previous one."""
        with self._lock:
            self._conflicts = list(conflicts)
            self._snapshot = list(snapshot)
            self._generation += 1
        logger.info("Conflict session opened with %d conflict(s)", len(conflicts))

    def clear(self) -> None:
        """Drop the current session; a newer commit superseded it."""
        with self._lock:
            self._conflicts = []
            self._snapshot = []
            self._generation += 1

    def _take(self, generation: int | None) -> list[Conflict]:
        """Empty the session and return its conflicts. Caller holds the lock."""
        if generation is not None and generation != self._generation:
            raise StaleSessionError(
                f"Conflict session {generation} was replaced by {self._generation}"
            )
        conflicts = self._conflicts
        self._conflicts = []
        self._snapshot = []
        return conflicts

    def keep_remote_for_all(self, generation: int | None = None) -> int:
        """Accept the remote version for every conflict.

        The commit already applied it, so only the session is cleared.

        Args:
            generation: Session the choice was made for; None means current.

        Returns:
            Number of conflicts acknowledged.

        Raises:
            StaleSessionError: If ``generation`` is no longer current.
        """
        with self._lock:
            count = len(self._take(generation))
        logger.info("Kept remote version for %d conflict(s)", count)
        return count

    def keep_local_for_all(self, generation: int | None = None) -> int:
        """Revert every conflicting record to its pre-merge local form.

        Reverts by slot: the record currently holding a conflict's remote
        id is replaced by that conflict's local record. Other records,
        including ones that share a merge key with a conflict, are left
        alone. The collection is persisted once.

        Args:
            generation: Session the choice was made for; None means current.

        Returns:
            Number of records reverted.

        Raises:
            StaleSessionError: If ``generation`` is no longer current.
        """
        # Same lock order as a sync commit: store first, then session
        with self._store.locked() as store:
            with self._lock:
                conflicts = self._take(generation)

            if not conflicts:
                return 0

            restored = list(store.records)
            slots = {record.id: index for index, record in enumerate(restored)}
            reverted = 0
            # Later conflicts hold the slot when several hit the same one
            for conflict in reversed(conflicts):
                index = slots.pop(conflict.remote.id, None)
                if index is None:
                    continue
                restored[index] = conflict.local
                reverted += 1

            if reverted:
                store.replace_all(restored)

        logger.info("Reverted %d record(s) to local version", reverted)
        return reverted
