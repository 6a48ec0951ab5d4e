"""Reminder CRUD plus upcoming, calendar and stats views."""

from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..logging_config import get_logger
from ..models.reminder import Reminder, ReminderCreate
from ..services.analytics import ReminderStats, reminder_stats
from ..services.background_services import ReminderServices
from ..services.triggers.occurrence import (
    calendar_for_month,
    format_reminder_time,
    frequency_label,
    next_occurrence,
    time_until_label,
    upcoming_reminders,
)
from .deps import get_services, require_store

logger = get_logger(__name__)

router = APIRouter(prefix="/reminders", tags=["reminders"])


class ReminderSchedule(BaseModel):
    """A reminder with its next occurrence and display labels."""
    reminder: Reminder
    next_occurrence: Optional[datetime] = None
    time_until: str
    frequency_label: str
    time_label: str


class CalendarDay(BaseModel):
    day: date
    reminders: List[Reminder]


class CheckResult(BaseModel):
    reminder_id: str
    fired: bool


def _schedule_view(reminder: Reminder, now: datetime, occurrence: Optional[datetime] = None) -> ReminderSchedule:
    if occurrence is None:
        occurrence = next_occurrence(reminder, now)
    return ReminderSchedule(
        reminder=reminder,
        next_occurrence=occurrence,
        time_until=time_until_label(occurrence, now),
        frequency_label=frequency_label(reminder, now),
        time_label=format_reminder_time(reminder.time),
    )


async def _load(services: ReminderServices, reminder_id: str) -> Reminder:
    require_store(services)
    reminder = await services.store.reminders.get(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail=f"Reminder {reminder_id} not found")
    return reminder


@router.get("", response_model=List[Reminder])
async def list_reminders(services: ReminderServices = Depends(get_services)) -> List[Reminder]:
    """List every reminder."""
    require_store(services)
    return await services.store.reminders.list()


@router.post("", response_model=Reminder, status_code=201)
async def create_reminder(payload: ReminderCreate, services: ReminderServices = Depends(get_services)) -> Reminder:
    require_store(services)
    created = await services.store.reminders.create(payload)
    if created is None:
        raise HTTPException(status_code=500, detail="Failed to create reminder")
    logger.info(f"Reminder for {created.contact_name} has been scheduled")
    return created


@router.get("/upcoming", response_model=List[ReminderSchedule])
async def get_upcoming_reminders(
    hours: int = Query(default=24, ge=1, le=24 * 31),
    limit: Optional[int] = Query(default=None, ge=1),
    services: ReminderServices = Depends(get_services),
) -> List[ReminderSchedule]:
    """Active reminders due within the next ``hours``, soonest first."""
    require_store(services)
    now = services.clock.now()
    reminders = await services.store.reminders.list()
    return [
        _schedule_view(reminder, now, occurrence)
        for reminder, occurrence in upcoming_reminders(reminders, now, timedelta(hours=hours), limit)
    ]


@router.get("/calendar", response_model=List[CalendarDay])
async def get_calendar(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    services: ReminderServices = Depends(get_services),
) -> List[CalendarDay]:
    """Days of a month with upcoming occurrences (defaults to the current month)."""
    require_store(services)
    now = services.clock.now()
    reminders = await services.store.reminders.list()
    days = calendar_for_month(reminders, year or now.year, month or now.month, now)
    return [CalendarDay(day=day, reminders=items) for day, items in days.items()]


@router.get("/stats", response_model=ReminderStats)
async def get_reminder_stats(services: ReminderServices = Depends(get_services)) -> ReminderStats:
    """Dashboard counts over every reminder."""
    require_store(services)
    reminders = await services.store.reminders.list()
    contacts = await services.store.contacts.list()
    return reminder_stats(reminders, services.clock.now(), total_contacts=len(contacts))


@router.get("/{reminder_id}", response_model=Reminder)
async def get_reminder(reminder_id: str, services: ReminderServices = Depends(get_services)) -> Reminder:
    return await _load(services, reminder_id)


@router.put("/{reminder_id}", response_model=Reminder)
async def replace_reminder(
    reminder_id: str,
    payload: ReminderCreate,
    services: ReminderServices = Depends(get_services),
) -> Reminder:
    """Replace a reminder's editable fields; lastTriggered is kept."""
    existing = await _load(services, reminder_id)
    updated = await services.store.reminders.update(existing.model_copy(update=dict(payload)))
    if updated is None:
        raise HTTPException(status_code=500, detail="Failed to update reminder")
    return updated


@router.delete("/{reminder_id}")
async def delete_reminder(reminder_id: str, services: ReminderServices = Depends(get_services)) -> JSONResponse:
    require_store(services)
    if not await services.store.reminders.delete(reminder_id):
        raise HTTPException(status_code=500, detail="Failed to delete reminder")
    return JSONResponse({"ok": True, "message": "Reminder has been removed"})


@router.post("/{reminder_id}/toggle", response_model=Reminder)
async def toggle_reminder(reminder_id: str, services: ReminderServices = Depends(get_services)) -> Reminder:
    """Flip a reminder between active and inactive."""
    await _load(services, reminder_id)
    updated = await services.store.reminders.toggle_active(reminder_id)
    if updated is None:
        raise HTTPException(status_code=500, detail="Failed to toggle reminder")
    return updated


@router.get("/{reminder_id}/next", response_model=ReminderSchedule)
async def get_next_occurrence(reminder_id: str, services: ReminderServices = Depends(get_services)) -> ReminderSchedule:
    reminder = await _load(services, reminder_id)
    return _schedule_view(reminder, services.clock.now())


@router.post("/{reminder_id}/check", response_model=CheckResult)
async def check_reminder(reminder_id: str, services: ReminderServices = Depends(get_services)) -> CheckResult:
    """Run the due check for one reminder now, firing it if due."""
    reminder = await _load(services, reminder_id)
    return CheckResult(reminder_id=reminder.id, fired=services.scheduler.check_reminder(reminder))


__all__ = ["router"]
