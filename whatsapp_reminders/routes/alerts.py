"""Notification polling, alert sound control and notification preferences."""

import re
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..logging_config import get_logger
from ..models.alerts import NotificationPreferences, PreferencesUpdate, ReminderNotification, SoundState
from ..services.background_services import ReminderServices
from ..utils.timeutils import align_to
from .deps import get_services

logger = get_logger(__name__)

router = APIRouter(tags=["alerts"])

_UNENCODED_OFFSET = re.compile(r'(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?) (\d{2}:\d{2})$')


class SchedulerStatus(BaseModel):
    running: bool
    tracked_reminders: int
    sound: SoundState


def _parse_since(since_timestamp: str, now: datetime) -> Optional[datetime]:
    normalized = since_timestamp.strip().replace('Z', '+00:00')
    # "+05:30" arrives as " 05:30" when the query string is not encoded
    normalized = _UNENCODED_OFFSET.sub(r'\1+\2', normalized)
    try:
        return align_to(datetime.fromisoformat(normalized), now)
    except ValueError:
        logger.warning(f"Invalid timestamp format: {since_timestamp}")
        return None


@router.get("/notifications", response_model=List[ReminderNotification])
async def get_notifications(
    since_timestamp: Optional[str] = None,
    services: ReminderServices = Depends(get_services),
) -> List[ReminderNotification]:
    """Notifications raised since the given timestamp (all retained ones otherwise)."""
    since = _parse_since(since_timestamp, services.clock.now()) if since_timestamp else None
    return services.outbox.since(since)


@router.post("/notifications/{notification_id}/click", response_model=ReminderNotification)
async def click_notification(notification_id: str, services: ReminderServices = Depends(get_services)) -> ReminderNotification:
    """Open the notification's WhatsApp link and silence the alert."""
    notification = services.outbox.click(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail=f"Notification {notification_id} not found")
    return notification


@router.get("/alerts/sound", response_model=SoundState)
async def get_sound_state(services: ReminderServices = Depends(get_services)) -> SoundState:
    return services.sound.state()


@router.post("/alerts/silence", response_model=SoundState)
async def silence_alert(services: ReminderServices = Depends(get_services)) -> SoundState:
    services.scheduler.silence_reminder()
    return services.sound.state()


@router.get("/scheduler", response_model=SchedulerStatus)
async def get_scheduler_status(services: ReminderServices = Depends(get_services)) -> SchedulerStatus:
    return SchedulerStatus(
        running=services.scheduler.running,
        tracked_reminders=len(services.scheduler.reminders),
        sound=services.sound.state(),
    )


@router.get("/preferences", response_model=NotificationPreferences)
async def get_preferences(services: ReminderServices = Depends(get_services)) -> NotificationPreferences:
    return services.preferences


@router.put("/preferences", response_model=NotificationPreferences)
async def update_preferences(
    update: PreferencesUpdate,
    services: ReminderServices = Depends(get_services),
) -> NotificationPreferences:
    return services.update_preferences(update)


__all__ = ["router"]
