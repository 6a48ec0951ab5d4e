"""Occurrence calculation for reminder recurrence rules.

All functions are pure: they take the reference time explicitly and never read
the clock. Occurrences are built in the timezone of the reference time, so an
aware ``now`` yields aware results and a naive ``now`` yields naive ones.

Monthly reminders whose ``month_day`` does not exist in a month (31 in April,
29-31 in February) are clamped to that month's last day.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ...models.reminder import Frequency, Reminder, ReminderTime, WeekDay


def _at(day: date, time: ReminderTime, tz) -> datetime:
    return datetime(day.year, day.month, day.day, time.hour, time.minute, tzinfo=tz)


def _local_date(value: datetime, now: datetime) -> date:
    """Calendar date of a stored instant, seen from ``now``'s timezone."""
    if value.tzinfo is None:
        return value.date()
    if now.tzinfo is not None:
        return value.astimezone(now.tzinfo).date()
    return value.astimezone().date()


def next_occurrence(reminder: Reminder, now: datetime) -> Optional[datetime]:
    """First instant strictly after ``now`` at which the reminder recurs.

    Returns None when the recurrence field required by the frequency is
    missing, or when a one-time reminder has already passed.
    """
    tz = now.tzinfo
    today = now.date()
    time = reminder.time

    if reminder.frequency == Frequency.DAILY:
        candidate = _at(today, time, tz)
        if candidate <= now:
            candidate = _at(today + timedelta(days=1), time, tz)
        return candidate

    if reminder.frequency == Frequency.WEEKLY:
        if not reminder.week_days:
            return None
        wanted = {day.ordinal for day in reminder.week_days}
        today_ordinal = WeekDay.from_date(now).ordinal
        # Offset 7 covers "today is the only match but its time has passed"
        for offset in range(8):
            if (today_ordinal + offset) % 7 not in wanted:
                continue
            candidate = _at(today + timedelta(days=offset), time, tz)
            if candidate > now:
                return candidate
        return None

    if reminder.frequency == Frequency.MONTHLY:
        if reminder.month_day is None:
            return None
        first_of_month = today.replace(day=1)
        candidate = _at(first_of_month + relativedelta(day=reminder.month_day), time, tz)
        if candidate <= now:
            candidate = _at(first_of_month + relativedelta(months=1, day=reminder.month_day), time, tz)
        return candidate

    if reminder.frequency == Frequency.ONCE:
        if reminder.date is None:
            return None
        candidate = _at(_local_date(reminder.date, now), time, tz)
        return candidate if candidate > now else None

    return None


def upcoming_occurrences(reminder: Reminder, start: datetime, end: datetime, limit: int = 100) -> List[datetime]:
    """Occurrences in ``(start, end)``, found by chaining next_occurrence."""
    results: List[datetime] = []
    cursor = start
    while len(results) < limit:
        found = next_occurrence(reminder, cursor)
        if found is None or found >= end:
            break
        results.append(found)
        cursor = found
    return results


def occurrences_in_month(reminder: Reminder, year: int, month: int, now: datetime) -> List[datetime]:
    """Future occurrences of ``reminder`` inside the given calendar month."""
    month_start = datetime(year, month, 1, tzinfo=now.tzinfo)
    month_end = month_start + relativedelta(months=1)
    start = max(now, month_start - timedelta(microseconds=1))
    if start >= month_end:
        return []
    return upcoming_occurrences(reminder, start, month_end)


def calendar_for_month(reminders: Iterable[Reminder], year: int, month: int, now: datetime) -> Dict[date, List[Reminder]]:
    """Map each day of the month that has an upcoming occurrence to its reminders."""
    days: Dict[date, List[Reminder]] = {}
    for reminder in reminders:
        if not reminder.is_active:
            continue
        for occurrence in occurrences_in_month(reminder, year, month, now):
            bucket = days.setdefault(occurrence.date(), [])
            if reminder not in bucket:
                bucket.append(reminder)
    return dict(sorted(days.items()))


def upcoming_reminders(
    reminders: Iterable[Reminder],
    now: datetime,
    within: timedelta = timedelta(hours=24),
    limit: Optional[int] = None,
) -> List[Tuple[Reminder, datetime]]:
    """Active reminders due within ``within`` of ``now``, soonest first."""
    horizon = now + within
    upcoming = []
    for reminder in reminders:
        if not reminder.is_active:
            continue
        found = next_occurrence(reminder, now)
        if found is not None and found <= horizon:
            upcoming.append((reminder, found))
    upcoming.sort(key=lambda item: item[1])
    return upcoming[:limit] if limit is not None else upcoming


# Display helpers

_DAY_NAMES = {
    WeekDay.MON: "Monday",
    WeekDay.TUE: "Tuesday",
    WeekDay.WED: "Wednesday",
    WeekDay.THU: "Thursday",
    WeekDay.FRI: "Friday",
    WeekDay.SAT: "Saturday",
    WeekDay.SUN: "Sunday",
}


def format_reminder_time(time: ReminderTime) -> str:
    """12-hour clock, e.g. ``9:05 AM``."""
    hour = time.hour % 12 or 12
    period = "PM" if time.hour >= 12 else "AM"
    return f"{hour}:{time.minute:02d} {period}"


def _ordinal_suffix(day: int) -> str:
    if day in (1, 21, 31):
        return "st"
    if day in (2, 22):
        return "nd"
    if day in (3, 23):
        return "rd"
    return "th"


def frequency_label(reminder: Reminder, now: datetime) -> str:
    """Human-readable recurrence; one-time dates are shown in ``now``'s timezone."""
    if reminder.frequency == Frequency.DAILY:
        return "Every day"
    if reminder.frequency == Frequency.WEEKLY:
        if not reminder.week_days:
            return "Weekly"
        if len(set(reminder.week_days)) == 7:
            return "Every day"
        return ", ".join(_DAY_NAMES[day] for day in reminder.week_days)
    if reminder.frequency == Frequency.MONTHLY:
        if reminder.month_day is None:
            return "Monthly"
        return f"Monthly on the {reminder.month_day}{_ordinal_suffix(reminder.month_day)}"
    if reminder.frequency == Frequency.ONCE:
        if reminder.date is None:
            return "One-time"
        return f"Once on {_local_date(reminder.date, now).isoformat()}"
    return "Unknown frequency"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def time_until_label(occurrence: Optional[datetime], now: datetime) -> str:
    if occurrence is None:
        return "No upcoming occurrence"
    minutes = int((occurrence - now).total_seconds() // 60)
    if minutes < 60:
        return f"{_plural(minutes, 'minute')} from now"
    hours = minutes // 60
    if hours < 24:
        return f"{_plural(hours, 'hour')} from now"
    return f"{_plural(hours // 24, 'day')} from now"
