"""Request dependencies shared by the routers."""

from fastapi import HTTPException, Request

from ..services.background_services import ReminderServices


def get_services(request: Request) -> ReminderServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Services not initialised")
    return services


def require_store(services: ReminderServices) -> None:
    if not services.store.available:
        raise HTTPException(status_code=503, detail="Database not configured")
