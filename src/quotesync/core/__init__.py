"""Core module - Shared configuration and state types."""

from quotesync.core.config import DEFAULT_ENDPOINT_URL, RemoteConfig
from quotesync.core.types import SyncState

__all__ = [
    # Config
    "DEFAULT_ENDPOINT_URL",
    "RemoteConfig",
    # Types
    "SyncState",
]
