"""Shared fixtures for quotesync tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from quotesync.client.records import QuoteRecord, RecordSource
from quotesync.client.store import RecordStore

FIXED_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_record(
    text: str,
    category: str,
    source: RecordSource = RecordSource.LOCAL,
    record_id: str | None = None,
) -> QuoteRecord:
    """Create a record with a predictable id and timestamp."""
    prefix = "server" if source == RecordSource.REMOTE else "local"
    return QuoteRecord(
        id=record_id or f"{prefix}-{text.strip().lower().replace(' ', '-')}",
        text=text,
        category=category,
        source=source,
        last_modified=FIXED_TIME,
    )


def make_remote(text: str, record_id: str | None = None) -> QuoteRecord:
    """Create a remote record as the gateway would."""
    return make_record(text, "Server", RecordSource.REMOTE, record_id)


@pytest.fixture
def store(tmp_path: Path) -> Iterator[RecordStore]:
    """Create a RecordStore with an empty collection."""
    s = RecordStore(tmp_path / "quotes.db")
    s.replace_all([])
    yield s
    s.close()


@pytest.fixture(name="make_record")
def make_record_fixture():  # type: ignore[no-untyped-def]
    """Factory for local (or explicitly sourced) records."""
    return make_record


@pytest.fixture(name="make_remote")
def make_remote_fixture():  # type: ignore[no-untyped-def]
    """Factory for remote records."""
    return make_remote
