"""HTTP gateway to the remote quote source.

This module provides:
- RemoteGateway: HTTP client for fetching and pushing quotes
- PushResult: Explicit success/failure outcome of a push
- APIError, PushError: Exception types for transport problems

The remote source serves generic posts. Each post title becomes a quote text
in the "Server" category; the remote has no timestamps, so fetched records are
stamped with the local time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from quotesync.client.records import QuoteRecord, RecordSource, remote_id, utc_now
from quotesync.core.config import RemoteConfig

logger = logging.getLogger(__name__)

REMOTE_CATEGORY = "Server"


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PushError(APIError):
    """Uploading a record to the remote source failed."""


@dataclass
class PushResult:
    """Outcome of a single-record push.

    Exactly one of ack/error is set. The gateway never decides what a failure
    means; callers keep the record local and may retry later.
    """

    ack: dict[str, Any] | None = None
    error: PushError | None = None

    @property
    def ok(self) -> bool:
        """Check if the remote acknowledged the record."""
        return self.error is None


def record_from_remote(item: dict[str, Any]) -> QuoteRecord | None:
    """Translate one remote item into a quote record.

    Args:
        item: Remote item with at least ``id`` and ``title``.

    Returns:
        The record, or None if the item has no usable id or title.
    """
    raw_id = item.get("id")
    if raw_id is None or isinstance(raw_id, bool) or str(raw_id).strip() == "":
        return None
    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        return None
    return QuoteRecord(
        id=remote_id(raw_id),
        text=title.strip(),
        category=REMOTE_CATEGORY,
        source=RecordSource.REMOTE,
        last_modified=utc_now(),
    )


class RemoteGateway:
    """HTTP client for the remote quote endpoint."""

    def __init__(self, config: RemoteConfig) -> None:
        """Initialize the gateway.

        Args:
            config: Remote endpoint configuration.
        """
        self._config = config
        self._client = httpx.Client(timeout=config.timeout)

    @property
    def endpoint_url(self) -> str:
        """Collection URL used for fetch and push."""
        return self._config.endpoint_url

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> RemoteGateway:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def health_check(self) -> bool:
        """Check if the remote endpoint answers.

        Returns:
            True if endpoint responded with a success status.
        """
        try:
            response = self._client.get(self.endpoint_url, params={"_limit": "1"})
            return response.is_success
        except httpx.HTTPError:
            return False

    def fetch_batch(self, limit: int) -> list[QuoteRecord]:
        """Fetch up to ``limit`` remote quotes.

        Transport failures, error statuses and malformed bodies are not
        raised: they are logged as warnings and an empty list is returned.

        Args:
            limit: Maximum number of items to request.

        Returns:
            Remote records, possibly empty.
        """
        try:
            response = self._client.get(
                self.endpoint_url, params={"_limit": str(limit)}
            )
        except httpx.HTTPError as e:
            logger.warning("Fetch from %s failed: %s", self.endpoint_url, e)
            return []

        if not response.is_success:
            logger.warning(
                "Fetch from %s failed with status %d",
                self.endpoint_url,
                response.status_code,
            )
            return []

        try:
            data = response.json()
        except ValueError:
            logger.warning("Fetch from %s returned invalid JSON", self.endpoint_url)
            return []

        if not isinstance(data, list):
            logger.warning("Fetch from %s did not return an array", self.endpoint_url)
            return []

        records: list[QuoteRecord] = []
        for item in data[:limit]:
            record = record_from_remote(item) if isinstance(item, dict) else None
            if record is None:
                logger.debug("Skipping unusable remote item: %r", item)
                continue
            records.append(record)

        logger.debug("Fetched %d remote quotes", len(records))
        return records

    def push_one(self, record: QuoteRecord) -> PushResult:
        """Upload one record (best effort).

        Args:
            record: The record to upload.

        Returns:
            PushResult holding the acknowledgement or the error.
        """
        try:
            response = self._client.post(
                self.endpoint_url,
                json={"title": record.text, "body": record.category, "userId": 1},
            )
        except httpx.HTTPError as e:
            return PushResult(error=PushError(f"Push failed: {e}"))

        if not response.is_success:
            return PushResult(
                error=PushError(
                    f"Push rejected with status {response.status_code}",
                    response.status_code,
                )
            )

        try:
            ack = response.json()
        except ValueError:
            ack = {}
        return PushResult(ack=ack if isinstance(ack, dict) else {"response": ack})
