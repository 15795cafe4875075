"""Tests for the quote manager flows."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from quotesync.client.api import PushError, PushResult, RemoteGateway
from quotesync.client.manager import QuoteManager
from quotesync.client.records import QuoteRecord
from quotesync.client.store import DedupPolicy
from quotesync.client.sync import SyncOutcome
from quotesync.client.transfer import ImportFileError
from quotesync.core.config import RemoteConfig


class FakeGateway:
    """Gateway double recording pushes and serving a fixed batch."""

    def __init__(self, batch: list[QuoteRecord] | None = None, push_ok: bool = True) -> None:
        self.batch = batch or []
        self.push_ok = push_ok
        self.pushed: list[QuoteRecord] = []

    def fetch_batch(self, limit: int) -> list[QuoteRecord]:
        return list(self.batch[:limit])

    def push_one(self, record: QuoteRecord) -> PushResult:
        self.pushed.append(record)
        if self.push_ok:
            return PushResult(ack={"id": 101})
        return PushResult(error=PushError("rejected", status_code=500))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def manager(tmp_path: Path, gateway: FakeGateway):  # type: ignore[no-untyped-def]
    """QuoteManager over an empty collection and a fake gateway."""
    m = QuoteManager(tmp_path / "quotes.db", gateway=gateway)
    m.store.replace_all([])
    yield m
    m.close()


class TestAddQuote:
    """Tests for the add flow."""

    def test_add_pushes(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        result = manager.add_quote("Be kind", "Wisdom")

        assert result.added
        assert result.pushed
        assert gateway.pushed == [result.record]

    def test_push_failure_keeps_local(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        """A failed push never undoes the local add."""
        gateway.push_ok = False

        result = manager.add_quote("Be kind", "Wisdom")

        assert result.added
        assert not result.pushed
        assert [r.text for r in manager.store.load()] == ["Be kind"]

    def test_no_push(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        result = manager.add_quote("Be kind", "Wisdom", push=False)

        assert result.added
        assert result.push is None
        assert gateway.pushed == []

    def test_rejected_input_not_pushed(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        result = manager.add_quote("  ", "Wisdom")

        assert not result.added
        assert gateway.pushed == []

    def test_gateway_without_push(self, tmp_path: Path) -> None:
        """A fetch-only gateway is enough; adds stay local."""
        class FetchOnly:
            def fetch_batch(self, limit: int) -> list[QuoteRecord]:
                return []

        with QuoteManager(tmp_path / "quotes.db", gateway=FetchOnly()) as m:
            result = m.add_quote("Be kind", "Wisdom")

        assert result.added
        assert result.push is None


class TestImportExport:
    """Tests for the file flows."""

    def test_import_file(self, manager: QuoteManager, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text(json.dumps([{"text": "Hi", "category": "Greet"}, {"text": ""}]))

        result = manager.import_file(path)

        assert result.added_count == 1
        assert result.invalid == 1

    def test_import_scenario_both_policies(self, tmp_path: Path) -> None:
        """Existing 'Hi'/'Greet' vs file with 'Hi'/'Greet' and 'hi '/'greet'."""
        path = tmp_path / "in.json"
        path.write_text(
            json.dumps([{"text": "Hi", "category": "Greet"}, {"text": "hi ", "category": "greet"}])
        )

        for policy, expected in ((DedupPolicy.MERGE_KEY, 0), (DedupPolicy.TEXT_AND_CATEGORY, 1)):
            with QuoteManager(tmp_path / f"{policy.value}.db", gateway=FakeGateway()) as m:
                m.store.replace_all([])
                m.add_quote("Hi", "Greet", push=False)

                assert m.import_file(path, policy).added_count == expected

    def test_import_bad_file_raises(self, manager: QuoteManager, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text("{}")

        with pytest.raises(ImportFileError):
            manager.import_file(path)
        assert len(manager.store) == 0

    def test_export(self, manager: QuoteManager, tmp_path: Path) -> None:
        manager.add_quote("Be kind", "Wisdom", push=False)

        path = manager.export(tmp_path / "exports")

        assert path.parent == tmp_path / "exports"
        assert [item["text"] for item in json.loads(path.read_text())] == ["Be kind"]


class TestSyncFlows:
    """Tests for manual sync and conflict choices."""

    def test_sync_and_keep_local(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        manager.add_quote("Be kind", "Wisdom", push=False)
        original = manager.store.records[0]
        gateway.batch = [QuoteRecord.create("Be kind", "Server", record_id="server-1")]

        report = manager.sync_now()

        assert report.outcome == SyncOutcome.CONFLICTS
        assert manager.keep_local_for_all() == 1
        assert manager.store.load() == [original]

    def test_sync_and_keep_remote(self, manager: QuoteManager, gateway: FakeGateway) -> None:
        manager.add_quote("Be kind", "Wisdom", push=False)
        gateway.batch = [QuoteRecord.create("Be kind", "Server", record_id="server-1")]
        manager.sync_now()

        assert manager.keep_remote_for_all() == 1
        assert manager.store.load()[0].category == "Server"
        assert not manager.session.is_open

    def test_auto_sync_start_stop(self, manager: QuoteManager) -> None:
        manager.start_auto_sync(3600)
        assert manager.orchestrator.is_running

        manager.stop_auto_sync()
        assert not manager.orchestrator.is_running

    def test_uses_config_fetch_limit(self, tmp_path: Path) -> None:
        limits: list[int] = []

        class Recording:
            def fetch_batch(self, limit: int) -> list[QuoteRecord]:
                limits.append(limit)
                return []

        config = RemoteConfig(endpoint_url="http://test/posts", fetch_limit=2)
        with QuoteManager(tmp_path / "quotes.db", config=config, gateway=Recording()) as m:
            m.sync_now()

        assert limits == [2]

    def test_builds_remote_gateway_by_default(self, tmp_path: Path) -> None:
        with QuoteManager(tmp_path / "quotes.db") as m:
            assert isinstance(m.orchestrator._gateway, RemoteGateway)
