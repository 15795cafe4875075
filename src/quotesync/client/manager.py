"""Quote manager: wires the store, gateway, sync and conflict session.

This is the entry point the presentation layer talks to. It owns the
user-driven flows (add, import, export, manual sync, conflict choice) and
delegates each step to the component responsible for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from quotesync.client.api import PushResult, RemoteGateway
from quotesync.client.browse import QuoteBrowser
from quotesync.client.notifications import NotificationSink
from quotesync.client.records import QuoteRecord
from quotesync.client.store import DedupPolicy, ImportResult, RecordStore
from quotesync.client.sync import (
    ConflictSession,
    GatewayProtocol,
    SyncOrchestrator,
    SyncReport,
    SyncTrigger,
)
from quotesync.client.transfer import export_to_file, read_import_file
from quotesync.core.config import RemoteConfig

logger = logging.getLogger(__name__)


@dataclass
class AddResult:
    """Result of the add-quote flow.

    Attributes:
        record: The stored record, or None if the input was rejected.
        push: Push outcome, or None if no push was attempted.
    """

    record: QuoteRecord | None
    push: PushResult | None = None

    @property
    def added(self) -> bool:
        """Check if a record was stored."""
        return self.record is not None

    @property
    def pushed(self) -> bool:
        """Check if the remote acknowledged the record."""
        return self.push is not None and self.push.ok


class QuoteManager:
    """Facade over the quote collection and its synchronization."""

    def __init__(
        self,
        db_path: Path,
        config: RemoteConfig | None = None,
        gateway: RemoteGateway | GatewayProtocol | None = None,
        notify: NotificationSink | None = None,
    ) -> None:
        """Open the store and build the sync components.

        Args:
            db_path: SQLite file holding the durable slots.
            config: Remote configuration (defaults apply if omitted).
            gateway: Gateway override; a RemoteGateway is built otherwise.
            notify: Sink for user-facing notices.
        """
        self._config = config or RemoteConfig()
        self._store = RecordStore(db_path)
        self._owns_gateway = gateway is None
        self._gateway = gateway if gateway is not None else RemoteGateway(self._config)
        self._session = ConflictSession(self._store)
        self._orchestrator = SyncOrchestrator(
            self._store,
            self._gateway,
            session=self._session,
            fetch_limit=self._config.fetch_limit,
            notify=notify,
        )
        self._browser = QuoteBrowser(self._store)

    @property
    def store(self) -> RecordStore:
        """The record store."""
        return self._store

    @property
    def orchestrator(self) -> SyncOrchestrator:
        """The sync orchestrator."""
        return self._orchestrator

    @property
    def session(self) -> ConflictSession:
        """The conflict session."""
        return self._session

    @property
    def browser(self) -> QuoteBrowser:
        """The browse/filter helper."""
        return self._browser

    def close(self) -> None:
        """Stop the timer and release resources."""
        self._orchestrator.stop()
        if self._owns_gateway and isinstance(self._gateway, RemoteGateway):
            self._gateway.close()
        self._store.close()

    def __enter__(self) -> QuoteManager:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === User flows ===

    def add_quote(self, text: str, category: str, push: bool = True) -> AddResult:
        """Add a quote locally, then try to push it.

        A push failure never undoes the local add; the record stays local.
        """
        record = self._store.add(text, category)
        if record is None:
            return AddResult(record=None)

        if not push or not hasattr(self._gateway, "push_one"):
            return AddResult(record=record)

        result: PushResult = self._gateway.push_one(record)
        if result.ok:
            logger.info("Pushed quote %s to server", record.id)
        else:
            logger.warning("Quote %s kept local: %s", record.id, result.error)
        return AddResult(record=record, push=result)

    def import_file(
        self,
        path: Path,
        policy: DedupPolicy = DedupPolicy.MERGE_KEY,
    ) -> ImportResult:
        """Import quotes from a JSON file.

        Raises:
            ImportFileError: If the file is not a readable JSON array.
        """
        items = read_import_file(path)
        return self._store.import_records(items, policy)

    def export(self, directory: Path) -> Path:
        """Export the collection to a timestamped JSON file in ``directory``."""
        return export_to_file(self._store.records, directory)

    def sync_now(self) -> SyncReport:
        """Run a manual sync cycle."""
        return self._orchestrator.run_cycle(SyncTrigger.MANUAL)

    def start_auto_sync(self, interval: float | None = None) -> None:
        """Start the periodic sync timer."""
        self._orchestrator.start(interval or self._config.sync_interval)

    def stop_auto_sync(self) -> None:
        """Stop the periodic sync timer."""
        self._orchestrator.stop()

    def keep_local_for_all(self, generation: int | None = None) -> int:
        """Revert all conflicts of the last cycle to the local version.

        Raises:
            StaleSessionError: If ``generation`` is not the current session.
        """
        return self._session.keep_local_for_all(generation)

    def keep_remote_for_all(self, generation: int | None = None) -> int:
        """Accept the server version for all conflicts of the last cycle.

        Raises:
            StaleSessionError: If ``generation`` is not the current session.
        """
        return self._session.keep_remote_for_all(generation)
