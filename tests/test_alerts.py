"""Tests for the notification outbox, alert sound and observer list."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from whatsapp_reminders.models.alerts import ReminderNotification
from whatsapp_reminders.services.alerts import AlertSound, NotificationOutbox
from whatsapp_reminders.services.events import Subscribers

T0 = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def notification(notification_id, created_at=T0):
    return ReminderNotification(
        id=notification_id,
        reminder_id="rem-1",
        title="WhatsApp Reminder",
        body="Time to send a message to Asha",
        link="https://wa.me/919876543210",
        created_at=created_at,
    )


class TestOutbox:
    def test_since_filters_by_creation_time(self):
        outbox = NotificationOutbox()
        outbox.notify(notification("old", T0))
        outbox.notify(notification("new", T0 + timedelta(minutes=5)))

        assert [n.id for n in outbox.since()] == ["old", "new"]
        assert [n.id for n in outbox.since(T0)] == ["new"]

    def test_oldest_evicted_beyond_max_size(self):
        outbox = NotificationOutbox(max_size=2)
        for index in range(3):
            outbox.notify(notification(f"n{index}"))

        assert [n.id for n in outbox.since()] == ["n1", "n2"]
        assert outbox.click("n0") is None

    def test_click_runs_action_once_per_click(self):
        outbox = NotificationOutbox()
        action = Mock()
        outbox.notify(notification("n1"), on_click=action)

        clicked = outbox.click("n1")

        assert clicked.clicked
        action.assert_called_once_with()

    def test_click_action_failure_is_logged(self):
        outbox = NotificationOutbox()
        outbox.notify(notification("n1"), on_click=Mock(side_effect=RuntimeError("boom")))
        assert outbox.click("n1").clicked

    def test_permission_is_granted(self):
        outbox = NotificationOutbox()
        assert outbox.request_permission()
        assert outbox.permission_granted


class TestAlertSound:
    def test_stop_without_loop_is_immediate(self):
        sound = AlertSound(now=lambda: T0)
        sound.play()
        assert sound.state().is_playing
        assert sound.state().started_at == T0

        sound.stop()

        assert not sound.is_playing
        assert sound.state().started_at is None

    async def test_fade_completes_after_delay(self):
        sound = AlertSound(fade_seconds=0.01)
        sound.play()
        sound.stop(fade=True)

        assert sound.is_playing
        assert sound.is_fading

        await asyncio.sleep(0.05)
        assert not sound.is_playing
        assert not sound.is_fading

    async def test_play_cancels_fade(self):
        sound = AlertSound(fade_seconds=0.01)
        sound.play()
        sound.stop(fade=True)
        sound.play()

        await asyncio.sleep(0.05)
        assert sound.is_playing
        assert not sound.is_fading

    async def test_hard_stop_during_fade(self):
        sound = AlertSound(fade_seconds=10)
        sound.play()
        sound.stop(fade=True)
        sound.stop(fade=False)
        assert not sound.is_playing
        assert not sound.is_fading


class TestSubscribers:
    def test_publish_and_unsubscribe(self):
        events = Subscribers("test")
        handler = Mock()
        unsubscribe = events.subscribe(handler)

        events.publish("a", 1)
        unsubscribe()
        events.publish("b", 2)

        handler.assert_called_once_with("a", 1)
        assert len(events) == 0

    async def test_async_handlers_are_scheduled(self):
        events = Subscribers("test")
        received = []

        async def handler(value):
            received.append(value)

        events.subscribe(handler)
        events.publish("x")
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert received == ["x"]

    async def test_async_handler_failure_is_contained(self):
        events = Subscribers("test")

        async def broken(_):
            raise RuntimeError("boom")

        healthy = Mock()
        events.subscribe(broken)
        events.subscribe(healthy)
        events.publish("x")
        await asyncio.sleep(0)

        healthy.assert_called_once_with("x")

    def test_async_handler_without_loop_is_dropped(self):
        events = Subscribers("test")
        received = []

        async def handler(value):
            received.append(value)

        events.subscribe(handler)
        events.publish("x")

        assert received == []
