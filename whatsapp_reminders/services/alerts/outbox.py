"""Notification sink that queues notifications for the browser client to poll."""

from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ...logging_config import get_logger
from ...models.alerts import ReminderNotification

logger = get_logger(__name__)


class NotificationOutbox:
    """Bounded, ordered store of raised notifications and their click actions."""

    def __init__(self, max_size: int = 200):
        self.max_size = max_size
        self._items: "OrderedDict[str, ReminderNotification]" = OrderedDict()
        self._click_actions: Dict[str, Callable[[], None]] = {}
        self.permission_granted = False

    def request_permission(self) -> bool:
        # Polling clients need no permission grant on the server side
        self.permission_granted = True
        return True

    def notify(self, notification: ReminderNotification, on_click: Optional[Callable[[], None]] = None) -> None:
        self._items[notification.id] = notification
        if on_click is not None:
            self._click_actions[notification.id] = on_click

        while len(self._items) > self.max_size:
            oldest_id, _ = self._items.popitem(last=False)
            self._click_actions.pop(oldest_id, None)

        logger.info(f"Notification queued: {notification.title} - {notification.body}")

    def since(self, timestamp: Optional[datetime] = None) -> List[ReminderNotification]:
        """Notifications created after ``timestamp`` (all of them when None)."""
        items = list(self._items.values())
        if timestamp is None:
            return items
        return [item for item in items if item.created_at > timestamp]

    def click(self, notification_id: str) -> Optional[ReminderNotification]:
        """Mark a notification clicked and run its click action."""
        notification = self._items.get(notification_id)
        if notification is None:
            return None

        notification.clicked = True
        action = self._click_actions.get(notification_id)
        if action is not None:
            try:
                action()
            except Exception as e:
                logger.error(f"Click action for notification {notification_id} failed: {e}")
        return notification
