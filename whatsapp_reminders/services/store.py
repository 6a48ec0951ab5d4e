"""Supabase-backed record stores with an in-process change feed."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..logging_config import get_logger
from ..models.library import (
    Contact,
    MessageTemplate,
    Sticker,
    StatusUpdate,
)
from ..models.reminder import Reminder
from .events import Subscribers

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ChangeEvent:
    """Emitted after every successful write made through a store."""
    table: str
    kind: str  # "insert", "update" or "delete"
    record_id: str


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordStore(Generic[ModelT]):
    """CRUD over one Supabase table.

    Every method degrades instead of raising: when the client is missing or a
    call fails the error is logged and None / [] / False is returned.
    """

    table: str = ""
    model: Type[ModelT]
    order_by: Optional[Tuple[str, bool]] = None  # (column, descending)
    # Model field whose unset values sort after every set one, whatever the direction
    nulls_last_field: Optional[str] = None
    created_column: Optional[str] = None

    def __init__(self, client: Any, changes: Subscribers):
        self.client = client
        self.changes = changes

    def _parse(self, rows: Optional[List[Dict[str, Any]]]) -> List[ModelT]:
        records = []
        for row in rows or []:
            try:
                records.append(self.model.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed {self.table} row {row.get('id')}: {e.error_count()} error(s)")
        return records

    def _nulls_last(self, records: List[ModelT]) -> List[ModelT]:
        if not self.nulls_last_field:
            return records
        return sorted(records, key=lambda record: getattr(record, self.nulls_last_field) is None)

    def _emit(self, kind: str, record_id: str) -> None:
        self.changes.publish(ChangeEvent(self.table, kind, str(record_id)))

    def _unavailable(self, action: str) -> bool:
        if self.client:
            return False
        logger.warning(f"Cannot {action} {self.table}: Supabase client not available")
        return True

    async def list(self) -> List[ModelT]:
        if self._unavailable("list"):
            return []

        try:
            query = self.client.table(self.table).select('*')
            if self.order_by:
                column, descending = self.order_by
                query = query.order(column, desc=descending)
            result = query.execute()
            return self._nulls_last(self._parse(result.data))

        except Exception as e:
            logger.error(f"Failed to list {self.table}: {e}")
            return []

    async def get(self, record_id: str) -> Optional[ModelT]:
        if self._unavailable("read"):
            return None

        try:
            result = (
                self.client
                .table(self.table)
                .select('*')
                .eq('id', record_id)
                .limit(1)
                .execute()
            )
            records = self._parse(result.data)
            return records[0] if records else None

        except Exception as e:
            logger.error(f"Failed to get {self.table} record {record_id}: {e}")
            return None

    async def create(self, payload: BaseModel) -> Optional[ModelT]:
        if self._unavailable("create"):
            return None

        try:
            data = payload.model_dump(by_alias=True, mode="json")
            if self.created_column:
                data[self.created_column] = _utc_now_iso()

            result = self.client.table(self.table).insert(data).execute()
            records = self._parse(result.data)
            if not records:
                logger.error(f"Insert into {self.table} returned no rows")
                return None

            created = records[0]
            logger.info(f"Created {self.table} record {created.id}")
            self._emit("insert", created.id)
            return created

        except Exception as e:
            logger.error(f"Failed to create {self.table} record: {e}")
            return None

    async def update(self, record: ModelT) -> Optional[ModelT]:
        data = record.model_dump(by_alias=True, mode="json", exclude={"id", "created_at"})
        return await self.patch(record.id, data)

    async def patch(self, record_id: str, fields: Dict[str, Any]) -> Optional[ModelT]:
        """Write ``fields`` (persisted column names) onto one record."""
        if self._unavailable("update"):
            return None

        try:
            result = (
                self.client
                .table(self.table)
                .update(fields)
                .eq('id', record_id)
                .execute()
            )
            records = self._parse(result.data)
            if not records:
                logger.warning(f"No {self.table} record {record_id} to update")
                return None

            self._emit("update", record_id)
            return records[0]

        except Exception as e:
            logger.error(f"Failed to update {self.table} record {record_id}: {e}")
            return None

    async def delete(self, record_id: str) -> bool:
        if self._unavailable("delete"):
            return False

        try:
            self.client.table(self.table) \
                .delete() \
                .eq('id', record_id) \
                .execute()

            logger.info(f"Deleted {self.table} record {record_id}")
            self._emit("delete", record_id)
            return True

        except Exception as e:
            logger.error(f"Failed to delete {self.table} record {record_id}: {e}")
            return False


class ReminderStore(RecordStore[Reminder]):
    table = "reminders"
    model = Reminder

    async def update(self, record: Reminder) -> Optional[Reminder]:
        return await self.patch(record.id, record.to_record())

    async def list_active(self) -> Optional[List[Reminder]]:
        """Active reminders, or None when the table could not be read."""
        if self._unavailable("list active"):
            return None

        try:
            result = (
                self.client
                .table(self.table)
                .select('*')
                .eq('isActive', True)
                .execute()
            )
            return self._parse(result.data)

        except Exception as e:
            logger.error(f"Failed to list active reminders: {e}")
            return None

    async def toggle_active(self, record_id: str) -> Optional[Reminder]:
        reminder = await self.get(record_id)
        if reminder is None:
            return None
        updated = await self.patch(record_id, {"isActive": not reminder.is_active})
        if updated:
            logger.info(f"Reminder {record_id} is now {'active' if updated.is_active else 'inactive'}")
        return updated

    async def mark_triggered(self, record_id: str, when: datetime) -> bool:
        return await self.patch(record_id, {"lastTriggered": when.isoformat()}) is not None


class ContactStore(RecordStore[Contact]):
    table = "contacts"
    model = Contact
    order_by = ("name", False)
    created_column = "createdAt"

    async def search(self, query: str) -> List[Contact]:
        if not query:
            return []
        if self._unavailable("search"):
            return []

        try:
            result = (
                self.client
                .table(self.table)
                .select('*')
                .or_(f"name.ilike.%{query}%,phoneNumber.ilike.%{query}%")
                .order('name', desc=False)
                .execute()
            )
            return self._parse(result.data)

        except Exception as e:
            logger.error(f"Failed to search contacts: {e}")
            return []

    async def mark_used(self, record_id: str) -> bool:
        return await self.patch(record_id, {"lastUsed": _utc_now_iso()}) is not None


class TemplateStore(RecordStore[MessageTemplate]):
    table = "message_templates"
    model = MessageTemplate
    order_by = ("createdAt", True)
    created_column = "createdAt"


class _FavoritesMixin:
    async def mark_used(self, record_id: str) -> bool:
        return await self.patch(record_id, {"lastUsed": _utc_now_iso()}) is not None

    async def set_favorite(self, record_id: str, favorite: bool):
        return await self.patch(record_id, {"favorite": favorite})


class StatusStore(_FavoritesMixin, RecordStore[StatusUpdate]):
    table = "status_updates"
    model = StatusUpdate
    order_by = ("lastUsed", True)
    created_column = "created_at"
    nulls_last_field = "last_used"


class StickerStore(_FavoritesMixin, RecordStore[Sticker]):
    table = "stickers"
    model = Sticker
    order_by = ("created_at", True)
    created_column = "created_at"


class DataStore:
    """All entity stores sharing one client and one change feed."""

    def __init__(self, client: Any):
        self.client = client
        self.changes = Subscribers("store-changes")
        self.reminders = ReminderStore(client, self.changes)
        self.contacts = ContactStore(client, self.changes)
        self.templates = TemplateStore(client, self.changes)
        self.statuses = StatusStore(client, self.changes)
        self.stickers = StickerStore(client, self.changes)

    @property
    def available(self) -> bool:
        return self.client is not None
