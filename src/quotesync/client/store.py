"""Record store for the local quote collection.

This module provides:
- RecordStore: Owner of the canonical in-memory collection and its
  persisted form
- DedupPolicy: Duplicate-detection key used by add/import
- ImportResult: Outcome of a bulk import

Architecture:
    The collection lives in memory and is written through to a SQLite
    key/value table on every commit. The whole collection is serialized
    into one slot, so a save is always a full overwrite.

    Slots:
    - quotes (durable): JSON array of quote records
    - lastCategoryFilter (durable): selected category, absent means "all"
    - last viewed (volatile): kept on the instance, never written to disk

    All writers (add, import, merge commit, conflict revert) hold the store
    lock so writes never interleave.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from quotesync.client.records import (
    QuoteRecord,
    default_quotes,
    is_valid_quote,
    merge_key,
    parse_records,
)

logger = logging.getLogger(__name__)

QUOTES_KEY = "quotes"
CATEGORY_FILTER_KEY = "lastCategoryFilter"
ALL_CATEGORIES = "all"


class DedupPolicy(str, Enum):
    """Key used to decide whether an incoming quote is already stored.

    MERGE_KEY matches on case-insensitive trimmed text, like the merge engine.
    TEXT_AND_CATEGORY matches on the exact trimmed (text, category) pair.
    """

    MERGE_KEY = "merge-key"
    TEXT_AND_CATEGORY = "text-and-category"

    def key_for(self, text: str, category: str) -> tuple[str, ...]:
        """Build the dedup key of a text/category pair under this policy."""
        if self is DedupPolicy.MERGE_KEY:
            return (merge_key(text),)
        return (text.strip(), category.strip())


@dataclass
class ImportResult:
    """Result of a bulk import."""

    added: list[QuoteRecord] = field(default_factory=list)
    invalid: int = 0
    duplicates: int = 0

    @property
    def added_count(self) -> int:
        """Number of records appended to the collection."""
        return len(self.added)


class RecordStore:
    """SQLite-backed owner of the quote collection."""

    def __init__(self, db_path: Path) -> None:
        """Open the store and load the persisted collection.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Serializes every writer of the collection
        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()

        self._last_viewed: QuoteRecord | None = None
        self._records: list[QuoteRecord] = self.load()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv_slots (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # === Slot access ===

    def get_slot(self, key: str) -> str | None:
        """Get a raw slot value."""
        with self._lock:
            cursor = self._conn.execute(
                "SELECT value FROM kv_slots WHERE key = ?",
                (key,),
            )
            row = cursor.fetchone()
        return row["value"] if row else None

    def set_slot(self, key: str, value: str) -> None:
        """Set a raw slot value."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv_slots (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete_slot(self, key: str) -> None:
        """Remove a slot."""
        with self._lock:
            self._conn.execute("DELETE FROM kv_slots WHERE key = ?", (key,))

    # === Collection ===

    def load(self) -> list[QuoteRecord]:
        """Read the persisted collection.

        Falls back to the default collection when nothing is stored, the
        stored value is not valid JSON, or its root is not an array. Invalid
        entries are dropped and missing id/source/lastModified are backfilled
        in memory only.

        Returns:
            The loaded collection.
        """
        raw = self.get_slot(QUOTES_KEY)
        if raw is None:
            logger.debug("No persisted quotes, using defaults")
            return default_quotes()

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Persisted quotes are corrupted, using defaults")
            return default_quotes()

        if not isinstance(parsed, list):
            logger.warning("Persisted quotes root is not an array, using defaults")
            return default_quotes()

        return parse_records(parsed)

    def save(self, records: Iterable[QuoteRecord] | None = None) -> None:
        """Persist the full collection, replacing the previous value.

        Args:
            records: Collection to persist. Defaults to the current one.
        """
        with self._lock:
            if records is not None:
                self._records = list(records)
            payload = json.dumps(
                [record.to_dict() for record in self._records],
                ensure_ascii=False,
            )
            self.set_slot(QUOTES_KEY, payload)
        logger.debug("Saved %d quotes", len(self._records))

    @property
    def records(self) -> tuple[QuoteRecord, ...]:
        """Snapshot of the current collection."""
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @contextmanager
    def locked(self) -> Iterator[RecordStore]:
        """Hold the write lock for a read-modify-write sequence."""
        with self._lock:
            yield self

    def replace_all(self, records: Iterable[QuoteRecord]) -> None:
        """Swap the whole collection and persist it."""
        self.save(records)

    def find_by_key(self, text: str) -> QuoteRecord | None:
        """Find a record by merge key."""
        key = merge_key(text)
        with self._lock:
            for record in self._records:
                if record.key == key:
                    return record
        return None

    def add(self, text: str, category: str) -> QuoteRecord | None:
        """Add a user-entered quote.

        Input is trimmed. Empty text or category, or a text whose merge key
        is already stored, is rejected without creating a record.

        Returns:
            The new record, or None if rejected.
        """
        if not is_valid_quote({"text": text, "category": category}):
            logger.debug("Rejected invalid quote input")
            return None

        with self._lock:
            if self.find_by_key(text) is not None:
                logger.info("Quote already exists: %r", text.strip())
                return None
            record = QuoteRecord.create(text, category)
            self._records.append(record)
            self.save()

        logger.info("Added quote %s (%s)", record.id, record.category)
        return record

    def import_records(
        self,
        items: Iterable[Any],
        policy: DedupPolicy = DedupPolicy.MERGE_KEY,
    ) -> ImportResult:
        """Append imported quotes that are valid and not yet stored.

        Each accepted item becomes a new local record with trimmed fields.
        Duplicates are detected against the existing collection and within
        the imported batch itself.

        Args:
            items: Raw decoded items (anything; invalid ones are dropped).
            policy: Duplicate-detection key.

        Returns:
            ImportResult with added records and skip counts.
        """
        result = ImportResult()

        with self._lock:
            seen = {policy.key_for(r.text, r.category) for r in self._records}

            for item in items:
                if not is_valid_quote(item):
                    result.invalid += 1
                    continue
                key = policy.key_for(item["text"], item["category"])
                if key in seen:
                    result.duplicates += 1
                    continue
                seen.add(key)
                result.added.append(QuoteRecord.create(item["text"], item["category"]))

            if result.added:
                self._records.extend(result.added)
                self.save()

        logger.info(
            "Import: %d added, %d duplicates, %d invalid",
            result.added_count,
            result.duplicates,
            result.invalid,
        )
        return result

    def categories(self) -> list[str]:
        """Unique categories in first-seen order."""
        with self._lock:
            return list(dict.fromkeys(r.category for r in self._records))

    # === Filter and last-viewed slots ===

    @property
    def last_filter(self) -> str:
        """Last selected category filter, "all" when unset."""
        return self.get_slot(CATEGORY_FILTER_KEY) or ALL_CATEGORIES

    def set_last_filter(self, category: str) -> None:
        """Persist the selected category filter."""
        self.set_slot(CATEGORY_FILTER_KEY, category)

    @property
    def last_viewed(self) -> QuoteRecord | None:
        """Last viewed record in this process, if any."""
        return self._last_viewed

    def set_last_viewed(self, record: QuoteRecord | None) -> None:
        """Remember (or clear) the last viewed record for this process."""
        self._last_viewed = record
