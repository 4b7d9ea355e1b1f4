"""Notification collaborator interface.

The orchestrator reports outcomes (saved, deleted, failures) through a
``Notifier``. Delivery, e.g. as toasts, is up to the presentation layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Notifier that writes every notification to the log."""

    def notify(self, notification: Notification) -> None:
        logger.log(
            _LOG_LEVELS[notification.level],
            f"{notification.title}: {notification.message}",
        )
