"""Merge engine: reconcile a local collection with a remote batch.

Implements "Remote Wins" with conflict reporting:
1. Records are matched by merge key (trimmed, lowercased text), never by id
2. Unmatched remote records are appended
3. Matched records that differ in category or source are reported as a
   conflict and the remote record takes the local slot
4. Matched records equal on both fields are left alone
5. Ids stay unique: a remote record whose id is already taken gets a
   fresh one

The function is pure: inputs are never mutated and records are immutable,
so a shallow copy of the local list is a full snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from quotesync.client.records import QuoteRecord, new_remote_id
from quotesync.client.sync.types import Conflict, MergeResult

logger = logging.getLogger(__name__)


def _with_free_id(merged: list[QuoteRecord], record: QuoteRecord, slot: int | None) -> QuoteRecord:
    """Return ``record``, re-identified if another slot already uses its id.

    Ids are unique within a collection; a remote item whose title changed
    between cycles arrives with an id that an older record still holds.
    """
    for index, other in enumerate(merged):
        if index != slot and other.id == record.id:
            fresh = replace(record, id=new_remote_id())
            logger.debug("Id %s already taken, using %s", record.id, fresh.id)
            return fresh
    return record


def differs(local: QuoteRecord, remote: QuoteRecord) -> bool:
    """Check if two records with the same merge key are in conflict."""
    return local.category != remote.category or local.source != remote.source


def merge(
    local: Sequence[QuoteRecord],
    remote_batch: Sequence[QuoteRecord],
) -> MergeResult:
    """Merge a remote batch into a local collection.

    Args:
        local: Current local collection (not modified).
        remote_batch: Records fetched from the remote source.

    Returns:
        MergeResult with the new collection (local order kept, new records
        appended), the conflicts of this cycle, and whether anything changed.
        Each conflict's ``remote`` is the record as placed in the collection.
    """
    merged = list(local)
    conflicts: list[Conflict] = []
    changed = False

    # First local slot per merge key
    slots: dict[str, int] = {}
    for index, record in enumerate(local):
        slots.setdefault(record.key, index)

    # Remote records appended in this batch: key -> index in merged
    appended: dict[str, int] = {}

    for remote in remote_batch:
        key = remote.key
        slot = slots.get(key)

        if slot is None:
            index = appended.get(key)
            if index is None:
                appended[key] = len(merged)
                merged.append(_with_free_id(merged, remote, None))
            else:
                merged[index] = _with_free_id(merged, remote, index)
            changed = True
            continue

        existing = local[slot]
        if not differs(existing, remote):
            continue

        logger.debug(
            "Conflict on %r: local %s/%s vs remote %s/%s",
            remote.text,
            existing.category,
            existing.source.value,
            remote.category,
            remote.source.value,
        )
        placed = _with_free_id(merged, remote, slot)
        conflicts.append(Conflict(local=existing, remote=placed))
        merged[slot] = placed
        changed = True

    return MergeResult(merged=merged, conflicts=conflicts, changed=changed)
