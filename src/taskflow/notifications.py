"""Transient user-visible notifications ("toasts").

The board controller and the reconciler report outcomes here.  A
notification is logged and handed to every registered sink; the CLI
registers a rich console sink, tests inspect :attr:`Notifier.history`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from loguru import logger


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Notification:
    level: NotificationLevel
    message: str
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


Sink = Callable[[Notification], None]


class Notifier:
    """Dispatch notifications to sinks and keep a bounded history."""

    def __init__(self, enabled: bool = True, max_history: int = 100):
        """Initialize the notifier.

        Args:
            enabled: Whether notifications are dispatched to sinks.
            max_history: Number of recent notifications kept in memory.
        """
        self.enabled = enabled
        self.max_history = max_history
        self.history: list[Notification] = []
        self._sinks: list[Sink] = []

    def add_sink(self, sink: Sink) -> None:
        self._sinks.append(sink)

    def success(self, message: str) -> Notification:
        return self._send(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._send(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self._send(NotificationLevel.INFO, message)

    def errors(self) -> list[Notification]:
        return [n for n in self.history if n.level == NotificationLevel.ERROR]

    def clear(self) -> None:
        self.history.clear()

    def _send(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.history.append(notification)
        if len(self.history) > self.max_history:
            del self.history[: len(self.history) - self.max_history]

        if level == NotificationLevel.ERROR:
            logger.warning("Notification: {}", message)
        else:
            logger.debug("Notification: {}", message)

        if not self.enabled:
            return notification
        for sink in list(self._sinks):
            try:
                sink(notification)
            except Exception as e:
                logger.error("Notification sink failed: {}", e)
        return notification
