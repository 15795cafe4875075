"""Tests for core configuration classes."""

from __future__ import annotations

import pytest

from quotesync.core.config import DEFAULT_ENDPOINT_URL, RemoteConfig
from quotesync.core.types import SyncState


class TestRemoteConfig:
    """Tests for RemoteConfig class."""

    def test_defaults(self) -> None:
        """Should use the public endpoint and default pacing."""
        config = RemoteConfig()
        assert config.endpoint_url == DEFAULT_ENDPOINT_URL
        assert config.timeout == 30.0
        assert config.fetch_limit == 5
        assert config.sync_interval == 60.0

    def test_url_trailing_slash_removed(self) -> None:
        """Should strip trailing slash from endpoint URL."""
        config = RemoteConfig(endpoint_url="https://example.com/posts/")
        assert config.endpoint_url == "https://example.com/posts"

    def test_rejects_zero_fetch_limit(self) -> None:
        """Should refuse a fetch limit below one."""
        with pytest.raises(ValueError):
            RemoteConfig(fetch_limit=0)

    def test_rejects_non_positive_interval(self) -> None:
        """Should refuse a zero sync interval."""
        with pytest.raises(ValueError):
            RemoteConfig(sync_interval=0)

    def test_from_dict_coerces_strings(self) -> None:
        """Values read from the CLI config file may be strings."""
        config = RemoteConfig.from_dict(
            {"endpoint_url": "http://test/posts", "fetch_limit": "10", "timeout": "2.5"}
        )
        assert config.endpoint_url == "http://test/posts"
        assert config.fetch_limit == 10
        assert config.timeout == 2.5

    def test_from_dict_ignores_unrelated_keys(self) -> None:
        """Should ignore keys that are not remote settings."""
        config = RemoteConfig.from_dict({"import_dedup": "merge-key", "sync_interval": None})
        assert config == RemoteConfig()

    def test_is_secure(self) -> None:
        """Should detect HTTPS endpoints."""
        assert RemoteConfig(endpoint_url="https://example.com").is_secure is True
        assert RemoteConfig(endpoint_url="http://localhost:8000").is_secure is False


class TestSyncState:
    """Tests for SyncState enum."""

    def test_values(self) -> None:
        """All cycle states should be defined."""
        assert {s.value for s in SyncState} == {
            "idle",
            "fetching",
            "merging",
            "committing",
            "skipped_empty",
        }
