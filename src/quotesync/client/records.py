"""Quote record model.

This module provides:
- QuoteRecord: One stored text + category + provenance item
- RecordSource: Where a record came from (local or remote)
- is_valid_quote: Structural validator for untrusted input
- merge_key: Case-insensitive identity used to match records
- default_quotes: Built-in collection used on first run

Records are immutable. A record is never patched field by field; merge and
revert swap whole records in the collection.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

LOCAL_ID_PREFIX = "local-"
REMOTE_ID_PREFIX = "server-"


class RecordSource(str, Enum):
    """Provenance of a quote record."""

    LOCAL = "local"
    REMOTE = "remote"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def new_local_id() -> str:
    """Generate a fresh id for a locally created record."""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def remote_id(raw_id: object) -> str:
    """Build the synthetic id of a record fetched from the remote source."""
    return f"{REMOTE_ID_PREFIX}{raw_id}"


def new_remote_id() -> str:
    """Generate a fresh id for a remote record whose own id is already taken."""
    return f"{REMOTE_ID_PREFIX}{uuid.uuid4().hex}"


def merge_key(text: str) -> str:
    """Return the key used to match records across local/remote boundaries.

    "Hello" and "hello " share a key; "Hello." does not.
    """
    return text.strip().lower()


def is_valid_quote(value: object) -> bool:
    """Check that a value looks like a quote.

    A valid quote is a mapping whose ``text`` and ``category`` are strings
    that are non-empty after trimming. Other fields are not inspected.
    """
    if not isinstance(value, dict):
        return False
    text = value.get("text")
    category = value.get("category")
    return (
        isinstance(text, str)
        and text.strip() != ""
        and isinstance(category, str)
        and category.strip() != ""
    )


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class QuoteRecord:
    """A single quote.

    Attributes:
        id: Unique id within the collection. Only used to locate a slot.
        text: Quote text (non-empty after trim). Its merge key is the identity.
        category: Category label (non-empty after trim).
        source: Where the record came from.
        last_modified: Creation or last replacement time. Provenance hint
            only, never used to break ties.
    """

    id: str
    text: str
    category: str
    source: RecordSource = RecordSource.LOCAL
    last_modified: datetime = field(default_factory=utc_now)

    @property
    def key(self) -> str:
        """Merge key of this record."""
        return merge_key(self.text)

    @classmethod
    def create(
        cls,
        text: str,
        category: str,
        source: RecordSource = RecordSource.LOCAL,
        record_id: str | None = None,
    ) -> QuoteRecord:
        """Create a new record with trimmed fields, a fresh id and timestamp."""
        return cls(
            id=record_id or new_local_id(),
            text=text.strip(),
            category=category.strip(),
            source=source,
            last_modified=utc_now(),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuoteRecord:
        """Create from a persisted dictionary, backfilling missing fields.

        The dictionary must already have passed is_valid_quote. A missing id
        gets a fresh local id, a missing or unknown source becomes LOCAL, and
        a missing or unparseable lastModified becomes now.
        """
        raw_id = data.get("id")
        record_id = raw_id if isinstance(raw_id, str) and raw_id else new_local_id()

        try:
            source = RecordSource(data.get("source"))
        except ValueError:
            source = RecordSource.LOCAL

        last_modified = _parse_timestamp(data.get("lastModified")) or utc_now()

        return cls(
            id=record_id,
            text=data["text"],
            category=data["category"],
            source=source,
            last_modified=last_modified,
        )

    def to_dict(self) -> dict[str, str]:
        """Serialize to the persisted/exported JSON shape."""
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "source": self.source.value,
            "lastModified": self.last_modified.isoformat(),
        }


DEFAULT_QUOTES: tuple[tuple[str, str], ...] = (
    ("The best way to get started is to quit talking and begin doing.", "Motivation"),
    ("Don’t let yesterday take up too much of today.", "Inspiration"),
    ("It’s not whether you get knocked down, it’s whether you get up.", "Resilience"),
)


def default_quotes() -> list[QuoteRecord]:
    """Return the built-in collection used when nothing valid is persisted."""
    return [QuoteRecord.create(text, category) for text, category in DEFAULT_QUOTES]


def parse_records(items: list[Any]) -> list[QuoteRecord]:
    """Turn raw persisted items into records, dropping invalid entries."""
    records: list[QuoteRecord] = []
    for item in items:
        if not is_valid_quote(item):
            logger.debug("Dropping invalid quote entry: %r", item)
            continue
        records.append(QuoteRecord.from_dict(item))
    return records
