"""Contacts, message templates, status texts and stickers."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactCreate(_Record):
    name: str
    phone_number: str
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class Contact(ContactCreate):
    id: str
    created_at: Optional[datetime] = None
    last_used: Optional[datetime] = None


class TemplateCreate(_Record):
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)


class MessageTemplate(TemplateCreate):
    id: str
    created_at: Optional[datetime] = None


class StatusCreate(_Record):
    """WhatsApp status text."""
    content: str
    category: str
    emoji: Optional[str] = None
    favorite: bool = False


class StatusUpdate(StatusCreate):
    id: str
    created_at: Optional[datetime] = Field(default=None, alias="created_at")
    last_used: Optional[datetime] = None


class StickerCreate(_Record):
    name: str
    image_url: str
    category: str
    favorite: bool = False


class Sticker(StickerCreate):
    id: str
    created_at: Optional[datetime] = Field(default=None, alias="created_at")
    last_used: Optional[datetime] = None
