"""User-facing notices for quotesync.

This module provides:
- Notification / NotificationType: a notice to show the user
- send_notification: deliver a notice to a sink (default: the log)
- Helpers for the notices emitted by a sync cycle and the add flow

The presentation layer installs its own sink (the CLI echoes notices);
without one, notices are logged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Type of notification."""

    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CONFLICT = auto()


@dataclass
class Notification:
    """Represents a notification to display."""

    title: str
    message: str
    type: NotificationType = NotificationType.INFO


NotificationSink = Callable[[Notification], None]

_LEVELS = {
    NotificationType.INFO: logging.INFO,
    NotificationType.WARNING: logging.WARNING,
    NotificationType.ERROR: logging.ERROR,
    NotificationType.CONFLICT: logging.WARNING,
}


def log_sink(notification: Notification) -> None:
    """Default sink: write the notice to the log."""
    logger.log(
        _LEVELS[notification.type],
        "%s: %s",
        notification.title,
        notification.message,
    )


def send_notification(
    notification: Notification,
    sink: NotificationSink | None = None,
) -> bool:
    """Deliver a notification.

    A failing sink never breaks the caller; the failure is logged.

    Args:
        notification: The notification to send.
        sink: Where to deliver it. Defaults to the log.

    Returns:
        True if the sink accepted the notification.
    """
    try:
        (sink or log_sink)(notification)
        return True
    except Exception as e:
        logger.debug(f"Notification sink failed: {e}")
        return False


def notify_sync_skipped(sink: NotificationSink | None = None) -> bool:
    """Notify that a cycle was skipped because the server sent nothing."""
    return send_notification(
        Notification(
            title="Sync Skipped",
            message="No quotes received from server.",
            type=NotificationType.WARNING,
        ),
        sink,
    )


def notify_up_to_date(sink: NotificationSink | None = None) -> bool:
    """Notify that local quotes already match the server."""
    return send_notification(
        Notification(title="Sync Complete", message="Quotes already up to date."),
        sink,
    )


def notify_synced(added: int, sink: NotificationSink | None = None) -> bool:
    """Notify a conflict-free commit."""
    return send_notification(
        Notification(
            title="Sync Complete",
            message=f"Quotes synced with server, no conflicts ({added} new).",
        ),
        sink,
    )


def notify_conflicts(count: int, sink: NotificationSink | None = None) -> bool:
    """Notify that conflicts were found and the server version applied."""
    plural = "s" if count != 1 else ""
    return send_notification(
        Notification(
            title="Sync Conflict",
            message=(
                f"{count} conflict{plural} detected, server version applied. "
                "You can restore your local version."
            ),
            type=NotificationType.CONFLICT,
        ),
        sink,
    )


def notify_error(message: str, sink: NotificationSink | None = None) -> bool:
    """Notify an error."""
    return send_notification(
        Notification(title="Sync Error", message=message, type=NotificationType.ERROR),
        sink,
    )


def notify_busy(sink: NotificationSink | None = None) -> bool:
    """Notify that a sync request was rejected because one is running."""
    return send_notification(
        Notification(
            title="Sync Busy",
            message="A sync is already in progress, request ignored.",
            type=NotificationType.WARNING,
        ),
        sink,
    )
