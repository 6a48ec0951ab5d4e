"""Tests for the reminder dashboard statistics."""

from datetime import datetime, timedelta, timezone

import pytest

from whatsapp_reminders.services.analytics import reminder_stats, time_slot

NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("hour,slot", [
    (5, "morning"), (11, "morning"),
    (12, "afternoon"), (16, "afternoon"),
    (17, "evening"), (20, "evening"),
    (21, "night"), (0, "night"), (4, "night"),
])
def test_time_slot_boundaries(hour, slot):
    assert time_slot(hour) == slot


def test_empty_list():
    stats = reminder_stats([], NOW)

    assert stats.total == 0
    assert stats.average_message_length == 0
    assert stats.recently_triggered == 0
    assert set(stats.by_frequency.values()) == {0}
    assert list(stats.by_weekday) == ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def test_counts(reminder_factory):
    reminders = [
        reminder_factory(id="a", message="ab", time={"hour": 7, "minute": 0}),
        reminder_factory(id="b", message="abc", frequency="weekly", weekDays=["mon", "fri"],
                         time={"hour": 13, "minute": 0}, isActive=False),
        reminder_factory(id="c", message="abcd", frequency="weekly", weekDays=["mon"],
                         time={"hour": 22, "minute": 0}),
        reminder_factory(id="d", message="x", frequency="monthly", monthDay=31,
                         time={"hour": 18, "minute": 0}),
    ]

    stats = reminder_stats(reminders, NOW, total_contacts=3)

    assert (stats.total, stats.active, stats.inactive) == (4, 3, 1)
    assert stats.by_frequency == {"daily": 1, "weekly": 2, "monthly": 1, "once": 0}
    assert stats.by_time_of_day == {"morning": 1, "afternoon": 1, "evening": 1, "night": 1}
    assert stats.by_weekday["mon"] == 2
    assert stats.by_weekday["fri"] == 1
    assert stats.by_weekday["sun"] == 0
    assert stats.total_contacts == 3


def test_average_message_length_rounds_half_up(reminder_factory):
    reminders = [reminder_factory(id="a", message="ab"), reminder_factory(id="b", message="abc")]
    assert reminder_stats(reminders, NOW).average_message_length == 3


def test_recently_triggered_is_last_seven_days(reminder_factory):
    reminders = [
        reminder_factory(id="edge", lastTriggered=(NOW - timedelta(days=7)).isoformat()),
        reminder_factory(id="stale", lastTriggered=(NOW - timedelta(days=7, seconds=1)).isoformat()),
        reminder_factory(id="never"),
    ]
    assert reminder_stats(reminders, NOW).recently_triggered == 1


def test_naive_last_triggered_against_aware_now(reminder_factory):
    reminder = reminder_factory(lastTriggered="2025-03-09T09:00:00")
    assert reminder_stats([reminder], NOW).recently_triggered == 1
