"""WhatsApp deep-link building and quick send."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..services.background_services import ReminderServices
from ..utils.phone import digits_only, display_phone_number, is_likely_indian_number, whatsapp_link
from .deps import get_services

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])


class WhatsAppLink(BaseModel):
    link: str
    display_number: str
    likely_indian: bool
    opened: bool = False


class QuickSendRequest(BaseModel):
    phone_number: str
    message: str
    contact_id: Optional[str] = None


def _build(phone_number: str, message: Optional[str], services: ReminderServices) -> WhatsAppLink:
    if len(digits_only(phone_number)) < 7:
        raise HTTPException(status_code=400, detail="Phone number must contain at least 7 digits")
    return WhatsAppLink(
        link=whatsapp_link(phone_number, message, add_indian_country_code=services.preferences.add_indian_country_code),
        display_number=display_phone_number(phone_number),
        likely_indian=is_likely_indian_number(phone_number),
    )


@router.get("/link", response_model=WhatsAppLink)
async def get_link(
    phone: str = Query(..., min_length=1),
    message: Optional[str] = None,
    services: ReminderServices = Depends(get_services),
) -> WhatsAppLink:
    return _build(phone, message, services)


@router.post("/send", response_model=WhatsAppLink)
async def quick_send(request: QuickSendRequest, services: ReminderServices = Depends(get_services)) -> WhatsAppLink:
    """Open WhatsApp on the host with a pre-filled message."""
    result = _build(request.phone_number, request.message, services)
    result.opened = services.dispatcher.open_link(result.link)
    if request.contact_id and services.store.available:
        await services.store.contacts.mark_used(request.contact_id)
    return result


__all__ = ["router"]
