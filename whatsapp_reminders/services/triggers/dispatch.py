"""Side effects raised when a reminder comes due."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

from ...logging_config import get_logger
from ...models.alerts import NotificationPreferences, ReminderNotification
from ...models.reminder import Reminder
from ...utils.phone import whatsapp_link

logger = get_logger(__name__)

NOTIFICATION_TITLE = "WhatsApp Reminder"


class Clock(Protocol):
    def now(self) -> datetime: ...


class NotificationSink(Protocol):
    def notify(self, notification: ReminderNotification, on_click: Optional[Callable[[], None]] = None) -> None: ...


class SoundPlayer(Protocol):
    @property
    def is_playing(self) -> bool: ...

    def play(self) -> None: ...

    def stop(self, fade: bool = True) -> None: ...


class LinkOpener(Protocol):
    def open(self, url: str) -> bool: ...


@dataclass
class DispatchResult:
    link: str
    sound: bool = False
    notification: Optional[ReminderNotification] = None
    link_opened: bool = False


def preview(message: str, length: int = 50) -> str:
    if len(message) <= length:
        return message
    return message[:length] + "..."


class NotificationDispatcher:
    """Runs sound, notification and auto-open for a due reminder.

    Each side effect is attempted on its own; a failure is logged and the
    others still run.
    """

    def __init__(
        self,
        notifications: NotificationSink,
        sound: SoundPlayer,
        links: LinkOpener,
        clock: Clock,
        preferences: Optional[NotificationPreferences] = None,
        preview_length: int = 50,
    ):
        self.notifications = notifications
        self.sound = sound
        self.links = links
        self.clock = clock
        self.preferences = preferences or NotificationPreferences()
        self.preview_length = preview_length

    def request_permission(self) -> None:
        """Ask the notification sink for permission if it supports it."""
        request = getattr(self.notifications, "request_permission", None)
        if request is None:
            logger.debug("Notification sink has no permission model, skipping")
            return
        try:
            request()
        except Exception as e:
            logger.warning(f"Notification permission request failed: {e}")

    def build_link(self, reminder: Reminder) -> str:
        return whatsapp_link(
            reminder.phone_number,
            reminder.message,
            add_indian_country_code=self.preferences.add_indian_country_code,
        )

    def build_notification(self, reminder: Reminder, link: str) -> ReminderNotification:
        body = f"Time to send a message to {reminder.contact_name}"
        if self.preferences.preview_messages:
            body += f': "{preview(reminder.message, self.preview_length)}"'
        return ReminderNotification(
            id=uuid.uuid4().hex,
            reminder_id=reminder.id,
            title=NOTIFICATION_TITLE,
            body=body,
            link=link,
            created_at=self.clock.now(),
        )

    def open_link(self, link: str) -> bool:
        """Open ``link`` and silence the alert, as a notification click does."""
        try:
            self.sound.stop(fade=True)
        except Exception as e:
            logger.error(f"Failed to stop alert sound: {e}")
        try:
            return self.links.open(link)
        except Exception as e:
            logger.error(f"Failed to open WhatsApp link: {e}")
            return False

    def dispatch(self, reminder: Reminder) -> DispatchResult:
        link = self.build_link(reminder)
        result = DispatchResult(link=link)
        prefs = self.preferences

        if prefs.sound:
            try:
                self.sound.play()
                result.sound = True
            except Exception as e:
                logger.error(f"Failed to play alert sound: {e}")

        if prefs.browser:
            try:
                notification = self.build_notification(reminder, link)
                self.notifications.notify(notification, on_click=lambda: self.open_link(link))
                result.notification = notification
            except Exception as e:
                logger.error(f"Failed to show notification for reminder {reminder.id}: {e}")

        if prefs.auto_open:
            try:
                result.link_opened = self.links.open(link)
            except Exception as e:
                logger.error(f"Failed to auto-open WhatsApp link for reminder {reminder.id}: {e}")

        return result
