"""Side-effect sinks for due reminders."""

from .links import BrowserLinkOpener
from .outbox import NotificationOutbox
from .sound import AlertSound

__all__ = ["AlertSound", "BrowserLinkOpener", "NotificationOutbox"]
