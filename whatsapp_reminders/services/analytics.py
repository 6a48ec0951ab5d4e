"""Summary statistics over the reminder list."""

import math
from datetime import datetime, timedelta
from typing import Dict, List

from pydantic import BaseModel

from ..models.reminder import Frequency, Reminder, WeekDay
from ..utils.timeutils import align_to

RECENT_WINDOW = timedelta(days=7)

# (label, first hour, last hour); anything unmatched is night
TIME_SLOTS = [
    ("morning", 5, 11),
    ("afternoon", 12, 16),
    ("evening", 17, 20),
]
NIGHT = "night"

WEEKDAYS_FROM_MONDAY = [
    WeekDay.MON, WeekDay.TUE, WeekDay.WED, WeekDay.THU, WeekDay.FRI, WeekDay.SAT, WeekDay.SUN,
]


class ReminderStats(BaseModel):
    """Counts shown on the analytics dashboard."""
    total: int
    active: int
    inactive: int
    by_frequency: Dict[str, int]
    by_time_of_day: Dict[str, int]
    by_weekday: Dict[str, int]
    recently_triggered: int
    average_message_length: int
    total_contacts: int = 0


def time_slot(hour: int) -> str:
    for label, first, last in TIME_SLOTS:
        if first <= hour <= last:
            return label
    return NIGHT


def reminder_stats(reminders: List[Reminder], now: datetime, total_contacts: int = 0) -> ReminderStats:
    """Aggregate ``reminders`` into dashboard counts.

    Weekday counts only consider weekly reminders. A reminder counts as
    recently triggered when it fired within the last seven days of ``now``.
    """
    active = sum(1 for reminder in reminders if reminder.is_active)

    by_frequency = {frequency.value: 0 for frequency in Frequency}
    by_time_of_day = {label: 0 for label, _, _ in TIME_SLOTS}
    by_time_of_day[NIGHT] = 0
    by_weekday = {day.value: 0 for day in WEEKDAYS_FROM_MONDAY}
    recently_triggered = 0
    cutoff = now - RECENT_WINDOW

    for reminder in reminders:
        by_frequency[reminder.frequency.value] += 1
        by_time_of_day[time_slot(reminder.time.hour)] += 1
        if reminder.frequency == Frequency.WEEKLY:
            for day in reminder.week_days or []:
                by_weekday[day.value] += 1
        if reminder.last_triggered is not None and align_to(reminder.last_triggered, now) >= cutoff:
            recently_triggered += 1

    average = 0
    if reminders:
        # half up, not Python's banker's rounding
        average = math.floor(sum(len(reminder.message) for reminder in reminders) / len(reminders) + 0.5)

    return ReminderStats(
        total=len(reminders),
        active=active,
        inactive=len(reminders) - active,
        by_frequency=by_frequency,
        by_time_of_day=by_time_of_day,
        by_weekday=by_weekday,
        recently_triggered=recently_triggered,
        average_message_length=average,
        total_contacts=total_contacts,
    )
