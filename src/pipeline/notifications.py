"""Notification sinks for human-readable processing messages.

Sinks are fire-and-forget: processors never wait on, or react to, delivery.
"""

import logging
from abc import ABC, abstractmethod

from src.core.schemas import Notification, NotificationLevel

_LOG_LEVELS: dict[str, int] = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class NotificationSink(ABC):
    """Base class for anything that shows messages to the user."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver one notification."""

    def _send(self, level: NotificationLevel, message: str, candidate_id: str | None) -> None:
        self.notify(Notification(level=level, message=message, candidate_id=candidate_id))

    def success(self, message: str, candidate_id: str | None = None) -> None:
        self._send("success", message, candidate_id)

    def error(self, message: str, candidate_id: str | None = None) -> None:
        self._send("error", message, candidate_id)

    def warning(self, message: str, candidate_id: str | None = None) -> None:
        self._send("warning", message, candidate_id)

    def info(self, message: str, candidate_id: str | None = None) -> None:
        self._send("info", message, candidate_id)


class LoggingNotifier(NotificationSink):
    """Writes notifications to the application log."""

    def __init__(self, name: str = "screening.notifications") -> None:
        self._logger = logging.getLogger(name)

    def notify(self, notification: Notification) -> None:
        self._logger.log(_LOG_LEVELS[notification.level], notification.message)


class CollectingNotifier(NotificationSink):
    """Keeps every notification in memory, in delivery order."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def by_level(self, level: NotificationLevel) -> list[Notification]:
        return [n for n in self.notifications if n.level == level]
