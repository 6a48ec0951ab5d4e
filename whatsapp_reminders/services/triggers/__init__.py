"""Reminder recurrence and due-reminder scheduling."""

from .dispatch import NotificationDispatcher
from .occurrence import next_occurrence, upcoming_occurrences
from .scheduler import ReminderScheduler

__all__ = ["NotificationDispatcher", "ReminderScheduler", "next_occurrence", "upcoming_occurrences"]
