"""Browsing and filtering the quote collection."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from quotesync.client.records import QuoteRecord, is_valid_quote
from quotesync.client.store import ALL_CATEGORIES

if TYPE_CHECKING:
    from quotesync.client.store import RecordStore


class QuoteBrowser:
    """Read-side helper: category list, filtering and random picks.

    The selected filter is remembered in the store's durable filter slot;
    the last shown quote goes into its volatile last-viewed slot.
    """

    def __init__(self, store: RecordStore, rng: random.Random | None = None) -> None:
        self._store = store
        self._rng = rng or random.Random()

    def categories(self) -> list[str]:
        """Unique categories, in first-seen order."""
        return self._store.categories()

    @property
    def current_filter(self) -> str:
        """Selected category, "all" when nothing was chosen."""
        return self._store.last_filter

    def select_filter(self, category: str) -> None:
        """Remember the selected category."""
        self._store.set_last_filter(category.strip() or ALL_CATEGORIES)

    def filter(self, category: str | None = None) -> list[QuoteRecord]:
        """Records in a category (case-insensitive); "all" returns everything."""
        selected = category if category is not None else self.current_filter
        records = list(self._store.records)
        if selected == ALL_CATEGORIES:
            return records
        wanted = selected.strip().lower()
        return [r for r in records if r.category.lower() == wanted]

    def random_quote(self, category: str | None = None) -> QuoteRecord | None:
        """Pick a random quote from the filtered set and mark it last viewed.

        Returns:
            The picked record, or None when the filtered set is empty (the
            last-viewed slot is cleared in that case).
        """
        candidates = self.filter(category)
        if not candidates:
            self._store.set_last_viewed(None)
            return None
        record = self._rng.choice(candidates)
        self._store.set_last_viewed(record)
        return record

    def last_viewed(self) -> QuoteRecord | None:
        """Last viewed record, if it still looks like a valid quote."""
        record = self._store.last_viewed
        if record is None:
            return None
        if not is_valid_quote({"text": record.text, "category": record.category}):
            return None
        return record
