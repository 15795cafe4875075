"""Configuration utilities for quotesync CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from quotesync.client.store import DedupPolicy
from quotesync.core.config import RemoteConfig

CONFIG_KEYS = ("endpoint_url", "timeout", "fetch_limit", "sync_interval", "import_dedup")


def get_config_dir() -> Path:
    """Get the configuration directory for quotesync.

    Returns:
        Path to ~/.quotesync or equivalent.
    """
    return Path.home() / ".quotesync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_database_path() -> Path:
    """Get the path to the quote database."""
    return get_config_dir() / "quotes.db"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_remote_config() -> RemoteConfig:
    """Build the remote configuration from the config file."""
    return RemoteConfig.from_dict(load_config())


def get_import_dedup() -> DedupPolicy:
    """Get the configured import dedup policy (merge key by default)."""
    value = load_config().get("import_dedup")
    if value:
        return DedupPolicy(value)
    return DedupPolicy.MERGE_KEY
