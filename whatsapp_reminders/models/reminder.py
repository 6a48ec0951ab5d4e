"""Reminder models and their persisted (camelCase) representation."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Frequency(str, Enum):
    """How often a reminder repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONCE = "once"


class WeekDay(str, Enum):
    """Weekday tags as stored in the weekDays column."""
    SUN = "sun"
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"

    @property
    def ordinal(self) -> int:
        """Day number with Sunday = 0."""
        return _WEEKDAY_ORDER.index(self)

    @classmethod
    def from_date(cls, value: datetime) -> "WeekDay":
        # datetime.weekday() is Monday = 0
        return _WEEKDAY_ORDER[(value.weekday() + 1) % 7]


_WEEKDAY_ORDER = [WeekDay.SUN, WeekDay.MON, WeekDay.TUE, WeekDay.WED, WeekDay.THU, WeekDay.FRI, WeekDay.SAT]


class ReminderTime(BaseModel):
    """Wall-clock time of day."""
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)


class ReminderFields(BaseModel):
    """Fields shared by stored reminders and API input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    contact_name: str
    phone_number: str
    message: str
    time: ReminderTime
    frequency: Frequency
    week_days: Optional[List[WeekDay]] = None
    month_day: Optional[int] = Field(default=None, ge=1, le=31)
    date: Optional[datetime] = None
    is_active: bool = True


class ReminderCreate(ReminderFields):
    """Reminder payload accepted by the API.

    Enforces that the recurrence field selected by ``frequency`` is present.
    """

    @model_validator(mode="after")
    def _check_recurrence_fields(self) -> "ReminderCreate":
        if self.frequency == Frequency.WEEKLY and not self.week_days:
            raise ValueError("weekDays must contain at least one day for weekly reminders")
        if self.frequency == Frequency.MONTHLY and self.month_day is None:
            raise ValueError("monthDay is required for monthly reminders")
        if self.frequency == Frequency.ONCE and self.date is None:
            raise ValueError("date is required for one-time reminders")
        return self


class Reminder(ReminderFields):
    """A stored reminder.

    Recurrence fields are read leniently here; a reminder missing the field its
    frequency needs simply never has a next occurrence.
    """

    id: str
    last_triggered: Optional[datetime] = None
    created_at: Optional[datetime] = Field(default=None, alias="created_at")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"id", "created_at"})
