"""CRUD routes for contacts, message templates, status texts and stickers."""

from typing import Callable, List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..models.library import (
    Contact,
    ContactCreate,
    MessageTemplate,
    StatusCreate,
    StatusUpdate,
    Sticker,
    StickerCreate,
    TemplateCreate,
)
from ..services.background_services import ReminderServices
from ..services.store import RecordStore
from .deps import get_services, require_store


class FavoriteRequest(BaseModel):
    favorite: bool


def _store(services: ReminderServices, store_name: str) -> RecordStore:
    require_store(services)
    return getattr(services.store, store_name)


async def _load(services: ReminderServices, store_name: str, label: str, record_id: str):
    record = await _store(services, store_name).get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} {record_id} not found")
    return record


def build_crud_router(
    prefix: str,
    store_name: str,
    label: str,
    create_model: Type[BaseModel],
    record_model: Type[BaseModel],
    extra_routes: Optional[Callable[[APIRouter], None]] = None,
) -> APIRouter:
    """List/create/get/update/delete routes over one entity store.

    ``extra_routes`` is called before the ``/{record_id}`` routes are added so
    fixed paths such as ``/search`` take precedence.
    """

    router = APIRouter(prefix=prefix, tags=[store_name])

    @router.get("", response_model=List[record_model])
    async def list_records(services: ReminderServices = Depends(get_services)):
        return await _store(services, store_name).list()

    @router.post("", response_model=record_model, status_code=201)
    async def create_record(payload: create_model, services: ReminderServices = Depends(get_services)):
        created = await _store(services, store_name).create(payload)
        if created is None:
            raise HTTPException(status_code=500, detail=f"Failed to create {label.lower()}")
        return created

    if extra_routes is not None:
        extra_routes(router)

    @router.get("/{record_id}", response_model=record_model)
    async def get_record(record_id: str, services: ReminderServices = Depends(get_services)):
        return await _load(services, store_name, label, record_id)

    @router.put("/{record_id}", response_model=record_model)
    async def update_record(record_id: str, payload: create_model, services: ReminderServices = Depends(get_services)):
        existing = await _load(services, store_name, label, record_id)
        updated = await _store(services, store_name).update(existing.model_copy(update=dict(payload)))
        if updated is None:
            raise HTTPException(status_code=500, detail=f"Failed to update {label.lower()}")
        return updated

    @router.delete("/{record_id}")
    async def delete_record(record_id: str, services: ReminderServices = Depends(get_services)) -> JSONResponse:
        if not await _store(services, store_name).delete(record_id):
            raise HTTPException(status_code=500, detail=f"Failed to delete {label.lower()}")
        return JSONResponse({"ok": True, "message": f"{label} has been removed"})

    return router


def add_usage_routes(router: APIRouter, store_name: str, label: str, record_model: Type[BaseModel], favorites: bool) -> None:
    """``POST /{id}/used`` and, for favourites, ``POST /{id}/favorite``."""

    @router.post("/{record_id}/used")
    async def mark_used(record_id: str, services: ReminderServices = Depends(get_services)) -> JSONResponse:
        await _load(services, store_name, label, record_id)
        if not await _store(services, store_name).mark_used(record_id):
            raise HTTPException(status_code=500, detail=f"Failed to update {label.lower()}")
        return JSONResponse({"ok": True})

    if not favorites:
        return

    @router.post("/{record_id}/favorite", response_model=record_model)
    async def set_favorite(record_id: str, request: FavoriteRequest, services: ReminderServices = Depends(get_services)):
        await _load(services, store_name, label, record_id)
        updated = await _store(services, store_name).set_favorite(record_id, request.favorite)
        if updated is None:
            raise HTTPException(status_code=500, detail=f"Failed to update {label.lower()}")
        return updated


def _contact_search(router: APIRouter) -> None:

    @router.get("/search", response_model=List[Contact])
    async def search_contacts(
        q: str = Query(default="", max_length=100),
        services: ReminderServices = Depends(get_services),
    ) -> List[Contact]:
        """Contacts whose name or phone number contains ``q``."""
        return await _store(services, "contacts").search(q.strip())


contacts_router = build_crud_router("/contacts", "contacts", "Contact", ContactCreate, Contact, extra_routes=_contact_search)
add_usage_routes(contacts_router, "contacts", "Contact", Contact, favorites=False)

templates_router = build_crud_router("/templates", "templates", "Template", TemplateCreate, MessageTemplate)

statuses_router = build_crud_router("/statuses", "statuses", "Status", StatusCreate, StatusUpdate)
add_usage_routes(statuses_router, "statuses", "Status", StatusUpdate, favorites=True)

stickers_router = build_crud_router("/stickers", "stickers", "Sticker", StickerCreate, Sticker)
add_usage_routes(stickers_router, "stickers", "Sticker", Sticker, favorites=True)


__all__ = ["build_crud_router", "contacts_router", "templates_router", "statuses_router", "stickers_router"]
