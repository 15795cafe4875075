"""Shared configuration classes for quotesync.

This module defines the settings used to reach the remote quote source and
to pace the periodic sync cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_ENDPOINT_URL = "https://jsonplaceholder.typicode.com/posts"


@dataclass
class RemoteConfig:
    """Configuration for talking to the remote quote source.

    Used by the RemoteGateway (HTTP) and by the SyncOrchestrator (batch size
    and timer interval).

    Attributes:
        endpoint_url: Collection URL of the remote source.
        timeout: Request timeout in seconds, handed to the transport.
        fetch_limit: Maximum number of remote items requested per cycle.
        sync_interval: Seconds between timer-driven sync cycles.
    """

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    timeout: float = 30.0
    fetch_limit: int = 5
    sync_interval: float = 60.0

    def __post_init__(self) -> None:
        """Normalize endpoint URL and numeric fields."""
        self.endpoint_url = self.endpoint_url.rstrip("/")
        self.timeout = float(self.timeout)
        self.fetch_limit = int(self.fetch_limit)
        self.sync_interval = float(self.sync_interval)
        if self.fetch_limit < 1:
            raise ValueError("fetch_limit must be at least 1")
        if self.sync_interval <= 0:
            raise ValueError("sync_interval must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteConfig:
        """Create from a config dictionary, ignoring unrelated keys."""
        kwargs = {
            key: data[key]
            for key in ("endpoint_url", "timeout", "fetch_limit", "sync_interval")
            if data.get(key) not in (None, "")
        }
        return cls(**kwargs)

    @property
    def is_secure(self) -> bool:
        """Check if the endpoint uses HTTPS.

        Returns:
            True if endpoint uses HTTPS.
        """
        return self.endpoint_url.startswith("https://")
