"""Composition root: builds the store, alert sinks and scheduler, and runs them."""

import asyncio
from typing import Any, Callable, Optional

from ..config import Settings
from ..logging_config import get_logger
from ..models.alerts import NotificationPreferences, PreferencesUpdate
from ..models.reminder import Reminder
from ..utils.timeutils import SystemClock, resolve_timezone
from .alerts import AlertSound, BrowserLinkOpener, NotificationOutbox
from .store import ChangeEvent, DataStore
from .triggers.dispatch import Clock, LinkOpener, NotificationDispatcher
from .triggers.scheduler import ReminderScheduler

logger = get_logger(__name__)


class ReminderServices:
    """Owns every long-lived service of the application.

    The scheduler's reminder cache is kept in sync two ways: every write made
    through the store triggers a refresh, and a background loop re-reads the
    active reminders every ``reminder_refresh_seconds`` to pick up edits made
    by other clients.
    """

    def __init__(
        self,
        settings: Settings,
        client: Any = None,
        clock: Optional[Clock] = None,
        links: Optional[LinkOpener] = None,
    ):
        self.settings = settings
        self.clock = clock or SystemClock(resolve_timezone(settings.timezone))
        self.store = DataStore(client)

        self.outbox = NotificationOutbox(max_size=settings.notification_history_size)
        self.sound = AlertSound(fade_seconds=settings.sound_fade_seconds, now=self.clock.now)
        self.links = links or BrowserLinkOpener()
        self.dispatcher = NotificationDispatcher(
            notifications=self.outbox,
            sound=self.sound,
            links=self.links,
            clock=self.clock,
            preferences=NotificationPreferences(
                sound=settings.sound_enabled,
                browser=settings.browser_notifications,
                preview_messages=settings.preview_messages,
                auto_open=settings.auto_open_whatsapp,
                add_indian_country_code=settings.add_indian_country_code,
            ),
            preview_length=settings.preview_length,
        )
        self.scheduler = ReminderScheduler(
            store=self.store.reminders,
            dispatcher=self.dispatcher,
            clock=self.clock,
            check_interval_seconds=settings.check_interval_seconds,
            due_tolerance_seconds=settings.due_tolerance_seconds,
            cooldown_seconds=settings.cooldown_seconds,
        )

        self._running = False
        self._refresh_task: Optional[asyncio.Task] = None
        self._unsubscribe_changes: Optional[Callable[[], None]] = None

    @property
    def preferences(self) -> NotificationPreferences:
        return self.dispatcher.preferences

    def update_preferences(self, update: PreferencesUpdate) -> NotificationPreferences:
        changes = update.model_dump(exclude_none=True)
        self.dispatcher.preferences = self.dispatcher.preferences.model_copy(update=changes)
        logger.info(f"Notification preferences updated: {changes}")
        return self.dispatcher.preferences

    async def start_services(self) -> None:
        """Start the scheduler and the cache refresh loop."""

        if self._running:
            logger.warning("Background services already running")
            return

        logger.info("Starting background services...")
        self._running = True

        try:
            await self.refresh_reminders()
            self._unsubscribe_changes = self.store.changes.subscribe(self._on_store_change)

            await self.scheduler.start(on_due=self._log_due_reminder)
            self._refresh_task = asyncio.create_task(self._refresh_loop())

            logger.info("All background services started successfully")

        except Exception as e:
            logger.error(f"Failed to start background services: {e}")
            await self.stop_services()

    async def stop_services(self) -> None:
        """Stop all background services."""

        if not self._running:
            return

        logger.info("Stopping background services...")

        if self._unsubscribe_changes:
            self._unsubscribe_changes()
            self._unsubscribe_changes = None

        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
        self._refresh_task = None

        try:
            await self.scheduler.stop()
        except Exception as e:
            logger.error(f"Error stopping reminder scheduler: {e}")

        self._running = False
        logger.info("Background services stopped")

    def is_running(self) -> bool:
        """Check if background services are running."""
        return self._running

    async def refresh_reminders(self) -> None:
        """Reload the scheduler's cache from the store; keeps the old cache on failure."""
        reminders = await self.store.reminders.list_active()
        if reminders is None:
            logger.debug("Reminder refresh skipped, store unavailable")
            return
        self.scheduler.set_reminders(reminders)

    def _on_store_change(self, event: ChangeEvent):
        if event.table != self.store.reminders.table:
            return None
        logger.debug(f"Reminder {event.record_id} changed ({event.kind}), refreshing cache")
        return self.refresh_reminders()

    def _log_due_reminder(self, reminder: Reminder) -> None:
        logger.info(f"Time to send a WhatsApp message to {reminder.contact_name}")

    async def _refresh_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.settings.reminder_refresh_seconds)
                await self.refresh_reminders()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error refreshing reminders: {e}")
