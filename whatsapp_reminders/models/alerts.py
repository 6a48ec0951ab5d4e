"""Notification, alert sound and preference models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ReminderNotification(BaseModel):
    """A notification raised for a due reminder."""
    id: str
    reminder_id: str
    title: str
    body: str
    link: str
    created_at: datetime
    clicked: bool = False


class SoundState(BaseModel):
    """Alert sound state polled by the browser client."""
    is_playing: bool
    fading: bool = False
    started_at: Optional[datetime] = None


class NotificationPreferences(BaseModel):
    """User-facing switches that shape what happens when a reminder is due."""
    sound: bool = True
    browser: bool = True
    preview_messages: bool = True
    auto_open: bool = True
    add_indian_country_code: bool = True


class PreferencesUpdate(BaseModel):
    sound: Optional[bool] = None
    browser: Optional[bool] = None
    preview_messages: Optional[bool] = None
    auto_open: Optional[bool] = None
    add_indian_country_code: Optional[bool] = None
