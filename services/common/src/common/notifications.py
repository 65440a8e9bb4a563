"""User-facing notification service."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, List, Optional

from .logging import get_logger

LOGGER = get_logger(__name__)

HISTORY_LIMIT = 200


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[Notification], None]


class NotificationService:
    """Collect notifications and fan them out to subscribers.

    Front ends subscribe to render toasts or console lines; ``history`` keeps
    the most recent ``history_limit`` notifications for inspection.
    """

    def __init__(self, enabled: bool = True, history_limit: int = HISTORY_LIMIT) -> None:
        self.enabled = enabled
        self._subscribers: List[Subscriber] = []
        self._history: Deque[Notification] = deque(maxlen=history_limit)

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber. Returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    def notify(self, level: NotificationLevel, message: str) -> Optional[Notification]:
        if not self.enabled:
            return None
        notification = Notification(level=level, message=message)
        self._history.append(notification)
        LOGGER.info("User notification", level=level.value, message=message)
        for subscriber in list(self._subscribers):
            subscriber(notification)
        return notification

    def error(self, message: str) -> Optional[Notification]:
        return self.notify(NotificationLevel.ERROR, message)

    def warning(self, message: str) -> Optional[Notification]:
        return self.notify(NotificationLevel.WARNING, message)

    def success(self, message: str) -> Optional[Notification]:
        return self.notify(NotificationLevel.SUCCESS, message)


# Singleton instance
_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get or create the process-wide notification service."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service


__all__ = [
    "Notification",
    "NotificationLevel",
    "NotificationService",
    "get_notification_service",
]
