"""Tests for the service composition root."""

import asyncio

import pytest

from whatsapp_reminders.config import Settings
from whatsapp_reminders.models.alerts import PreferencesUpdate
from whatsapp_reminders.models.reminder import ReminderCreate
from whatsapp_reminders.services.background_services import ReminderServices
from whatsapp_reminders.services.store import ChangeEvent


def reminder_row(reminder_id, hour=18, active=True):
    return {
        "id": reminder_id,
        "contactName": "Asha",
        "phoneNumber": "9876543210",
        "message": "Dinner?",
        "time": {"hour": hour, "minute": 0},
        "frequency": "daily",
        "isActive": active,
    }


@pytest.fixture
def settings():
    return Settings(timezone=None, check_interval_seconds=60, reminder_refresh_seconds=60)


@pytest.fixture
def services(settings, fake_supabase, clock, links):
    return ReminderServices(settings, client=fake_supabase, clock=clock, links=links)


async def test_start_loads_active_reminders(services, fake_supabase):
    fake_supabase.tables["reminders"] = [reminder_row("a"), reminder_row("b", active=False)]

    await services.start_services()
    try:
        assert services.is_running()
        assert services.scheduler.running
        assert [r.id for r in services.scheduler.reminders] == ["a"]
    finally:
        await services.stop_services()

    assert not services.is_running()
    assert not services.scheduler.running


async def test_store_writes_refresh_the_scheduler(services):
    await services.start_services()
    try:
        created = await services.store.reminders.create(ReminderCreate.model_validate({
            "contactName": "Ravi",
            "phoneNumber": "9811111111",
            "message": "Call",
            "time": {"hour": 20, "minute": 0},
            "frequency": "daily",
        }))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert [r.id for r in services.scheduler.reminders] == [created.id]

        await services.store.reminders.toggle_active(created.id)
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert services.scheduler.reminders == []
    finally:
        await services.stop_services()


async def test_library_writes_do_not_refresh(services, fake_supabase):
    await services.start_services()
    try:
        reads_before = sum(1 for table, op, _ in fake_supabase.calls if table == "reminders" and op == "select")
        services.store.changes.publish(ChangeEvent("contacts", "insert", "c1"))
        await asyncio.sleep(0)
        reads_after = sum(1 for table, op, _ in fake_supabase.calls if table == "reminders" and op == "select")
        assert reads_after == reads_before
    finally:
        await services.stop_services()


async def test_failed_refresh_keeps_cache(services, fake_supabase):
    fake_supabase.tables["reminders"] = [reminder_row("a")]
    await services.refresh_reminders()

    fake_supabase.fail = True
    await services.refresh_reminders()

    assert [r.id for r in services.scheduler.reminders] == ["a"]


async def test_runs_without_database(settings, clock, links):
    services = ReminderServices(settings, client=None, clock=clock, links=links)

    await services.start_services()
    try:
        assert services.scheduler.running
        assert services.scheduler.reminders == []
    finally:
        await services.stop_services()


def test_preferences_follow_settings(clock, links):
    settings = Settings(timezone=None, sound_enabled=False, auto_open_whatsapp=False)
    services = ReminderServices(settings, clock=clock, links=links)

    assert services.preferences.sound is False
    assert services.preferences.auto_open is False
    assert services.preferences.browser is True


def test_update_preferences(services):
    updated = services.update_preferences(PreferencesUpdate(sound=False))

    assert updated.sound is False
    assert updated.browser is True
    assert services.dispatcher.preferences is updated
