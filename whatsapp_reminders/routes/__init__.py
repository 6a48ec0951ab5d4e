"""API routes for the WhatsApp Reminder service."""

from fastapi import APIRouter

from .alerts import router as alerts_router
from .library import contacts_router, statuses_router, stickers_router, templates_router
from .reminders import router as reminders_router
from .whatsapp import router as whatsapp_router

api_router = APIRouter(prefix="/api")

api_router.include_router(reminders_router)
api_router.include_router(contacts_router)
api_router.include_router(templates_router)
api_router.include_router(statuses_router)
api_router.include_router(stickers_router)
api_router.include_router(alerts_router)
api_router.include_router(whatsapp_router)

__all__ = ["api_router"]
