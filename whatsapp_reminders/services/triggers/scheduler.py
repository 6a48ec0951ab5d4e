"""Due-reminder scheduler: polls cached reminders and fires the ones that come due."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ...logging_config import get_logger
from ...models.reminder import Reminder
from ...utils.timeutils import align_to
from ..events import Subscribers
from .dispatch import Clock, NotificationDispatcher
from .occurrence import next_occurrence

logger = get_logger(__name__)


class ReminderScheduler:
    """Fires reminders near their scheduled instant, at most once per due window.

    A reminder is due while the wall clock is within ``due_tolerance`` of one of
    its occurrences. Once fired it stays quiet for ``cooldown``, judged from the
    newer of its persisted ``last_triggered`` and this process's own fire log,
    so a failed ``last_triggered`` write cannot cause a second fire here.
    """

    def __init__(
        self,
        store: Any,
        dispatcher: NotificationDispatcher,
        clock: Clock,
        check_interval_seconds: float = 15,
        due_tolerance_seconds: float = 30,
        cooldown_seconds: float = 300,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock
        self.check_interval = check_interval_seconds
        self.due_tolerance = timedelta(seconds=due_tolerance_seconds)
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self.due_events = Subscribers("due-reminders")

        self._reminders: List[Reminder] = []
        self._fired_at: Dict[str, datetime] = {}
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._pending_writes: Set[asyncio.Task] = set()
        self._unsubscribe_on_due: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def reminders(self) -> List[Reminder]:
        return list(self._reminders)

    async def start(self, on_due: Optional[Callable[[Reminder], Any]] = None) -> None:
        """Start polling; replaces any loop already running."""

        await self._cancel_task()

        if on_due is not None:
            if self._unsubscribe_on_due:
                self._unsubscribe_on_due()
            self._unsubscribe_on_due = self.subscribe(on_due)

        self.dispatcher.request_permission()

        self._running = True
        self.check_reminders()
        self._task = asyncio.create_task(self._scheduler_loop())
        logger.info(f"Reminder scheduler started (checking every {self.check_interval}s)")

    async def stop(self) -> None:
        """Stop polling, drop cached state and silence the alert immediately."""

        was_running = self._running
        self._running = False
        await self._cancel_task()

        self._reminders = []
        self._fired_at.clear()

        if self._unsubscribe_on_due:
            self._unsubscribe_on_due()
            self._unsubscribe_on_due = None

        try:
            self.dispatcher.sound.stop(fade=False)
        except Exception as e:
            logger.error(f"Failed to stop alert sound: {e}")

        if was_running:
            logger.info("Reminder scheduler stopped")

    async def _cancel_task(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    def subscribe(self, handler: Callable[[Reminder], Any]) -> Callable[[], None]:
        """Register a due-reminder handler; returns its unsubscribe callable."""
        return self.due_events.subscribe(handler)

    def set_reminders(self, reminders: List[Reminder]) -> None:
        """Replace the cached reminders (inactive ones are dropped)."""
        self._reminders = [reminder for reminder in reminders if reminder.is_active]
        logger.debug(f"Scheduler now tracking {len(self._reminders)} active reminders")

    def is_sound_active(self) -> bool:
        return self.dispatcher.sound.is_playing

    def silence_reminder(self) -> None:
        """Fade out the alert sound without touching the reminders."""
        if self.is_sound_active():
            logger.info("Alert silenced by user")
            self.dispatcher.sound.stop(fade=True)

    def is_due(self, reminder: Reminder, now: datetime) -> bool:
        """Whether ``now`` lies within the closed due window of one of the reminder's occurrences."""
        if not reminder.is_active:
            return False
        # next_occurrence is strictly after its cursor; step back so the late edge is included
        occurrence = next_occurrence(reminder, now - self.due_tolerance - timedelta(microseconds=1))
        if occurrence is None:
            return False
        return abs(occurrence - now) <= self.due_tolerance

    def check_reminder(self, reminder: Reminder) -> bool:
        """Fire ``reminder`` if it is due and not cooling down; True when it fired."""
        _, fired = self._evaluate(reminder, self.clock.now())
        return fired

    def check_reminders(self) -> List[Reminder]:
        """One scheduler tick; returns the reminders fired by it."""
        now = self.clock.now()
        any_due = False
        fired = []

        for reminder in list(self._reminders):
            due, did_fire = self._evaluate(reminder, now)
            any_due = any_due or due
            if did_fire:
                fired.append(reminder)

        if not any_due and self.is_sound_active():
            logger.debug("No reminders due, fading out alert sound")
            self.dispatcher.sound.stop(fade=True)

        return fired

    def _evaluate(self, reminder: Reminder, now: datetime) -> Tuple[bool, bool]:
        if not self.is_due(reminder, now):
            return False, False

        if self._cooling_down(reminder, now):
            logger.debug(f"Reminder {reminder.id} is due but fired recently, skipping")
            return True, False

        self._fire(reminder, now)
        return True, True

    def _cooling_down(self, reminder: Reminder, now: datetime) -> bool:
        stamps = [stamp for stamp in (reminder.last_triggered, self._fired_at.get(reminder.id)) if stamp]
        if not stamps:
            return False
        last = max(align_to(stamp, now) for stamp in stamps)
        return now - last < self.cooldown

    def _fire(self, reminder: Reminder, now: datetime) -> None:
        logger.info(f"Reminder due: {reminder.contact_name} - {reminder.message[:50]}")

        self._fired_at[reminder.id] = now
        self._reminders = [
            cached.model_copy(update={"last_triggered": now}) if cached.id == reminder.id else cached
            for cached in self._reminders
        ]

        self.dispatcher.dispatch(reminder)
        self.due_events.publish(reminder)
        self._persist_last_triggered(reminder.id, now)

    def _persist_last_triggered(self, reminder_id: str, when: datetime) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, lastTriggered for reminder {reminder_id} not persisted")
            return

        task = loop.create_task(self._write_last_triggered(reminder_id, when))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_last_triggered(self, reminder_id: str, when: datetime) -> None:
        try:
            if await self.store.mark_triggered(reminder_id, when):
                logger.debug(f"Recorded lastTriggered for reminder {reminder_id}")
            else:
                logger.warning(f"Could not record lastTriggered for reminder {reminder_id}")
        except Exception as e:
            logger.error(f"Failed to record lastTriggered for reminder {reminder_id}: {e}")

    async def _scheduler_loop(self) -> None:
        """Main scheduler loop."""

        while self._running:
            try:
                await asyncio.sleep(self.check_interval)
                fired = self.check_reminders()
                if fired:
                    logger.info(f"Fired {len(fired)} reminder(s)")
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in reminder scheduler loop: {e}")
