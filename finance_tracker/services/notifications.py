"""
Notification feed shown to the user.
"""
from collections import deque
from itertools import count
from typing import Deque, List

import structlog

from ..models.api_responses import Notification
from ..utils.constants import DEFAULT_NOTIFICATION_HISTORY, NotificationLevel

logger = structlog.get_logger()


class NotificationCenter:
    """Fire-and-forget success/error messages, kept until the UI drains them."""

    def __init__(self, history_size: int = DEFAULT_NOTIFICATION_HISTORY):
        self._items: Deque[Notification] = deque(maxlen=history_size)
        self._sequence = count(1)

    def success(self, message: str) -> Notification:
        return self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._push(NotificationLevel.ERROR, message)

    def _push(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(id=next(self._sequence), level=level, message=message)
        self._items.append(notification)
        logger.info("Notification queued", notification_level=level.value, notification=message)
        return notification

    def pending(self) -> List[Notification]:
        """Notifications not drained yet, oldest first."""
        return list(self._items)

    def drain(self) -> List[Notification]:
        """Return and forget pending notifications."""
        items = list(self._items)
        self._items.clear()
        return items
