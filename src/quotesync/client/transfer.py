"""Import and export of quote files.

This module provides:
- read_import_file: Decode an import file into raw items
- export_filename: Deterministic, timestamp-suffixed export name
- export_to_file: Write the collection as indented JSON

Import files are JSON arrays. Items are validated and deduplicated by the
record store, not here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from quotesync.client.records import QuoteRecord, utc_now
from quotesync.client.sync.types import SyncError

logger = logging.getLogger(__name__)


class ImportFileError(SyncError):
    """Import file is unreadable, not JSON, or not a JSON array."""


def read_import_file(path: Path) -> list[Any]:
    """Read an import file.

    Args:
        path: File to read.

    Returns:
        The decoded array items (not yet validated).

    Raises:
        ImportFileError: If the file cannot be read or its root is not an array.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFileError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFileError(f"Invalid JSON in {path}: {e.msg}") from e

    if not isinstance(data, list):
        raise ImportFileError(f"Invalid file {path}: root must be an array of quotes")

    return data


def export_filename(now: datetime | None = None) -> str:
    """Build the export file name: quotes-<ISO timestamp>.json.

    Characters that are awkward in file names (':' and '.') become '-'.
    """
    stamp = (now or utc_now()).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z").replace(":", "-").replace(".", "-")
    return f"quotes-{stamp}.json"


def export_to_file(
    records: Iterable[QuoteRecord],
    directory: Path,
    now: datetime | None = None,
) -> Path:
    """Write the collection to a new export file.

    Args:
        records: Collection to export.
        directory: Target directory (created if missing).
        now: Timestamp used in the file name.

    Returns:
        Path of the written file.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / export_filename(now)
    payload = [record.to_dict() for record in records]
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Exported %d quotes to %s", len(payload), target)
    return target
