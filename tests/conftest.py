"""Pytest configuration and fixtures."""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from whatsapp_reminders.models.reminder import Reminder


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, delta) -> None:
        self.current = self.current + delta


class FakeQuery:
    """Just enough of the supabase-py query builder for the stores."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.ordering = None
        self.row_limit = None

    def select(self, *columns):
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def or_(self, expression):
        clauses = []
        for clause in expression.split(","):
            column, _, pattern = clause.split(".", 2)
            clauses.append((column, pattern.strip("%").lower()))
        self.filters.append(
            lambda row: any(needle in str(row.get(column) or "").lower() for column, needle in clauses)
        )
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self):
        self.db.calls.append((self.table_name, self.op, self.payload))
        if self.db.fail:
            raise RuntimeError("database unavailable")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            row = dict(self.payload)
            row.setdefault("id", uuid.uuid4().hex)
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated)

        if self.op == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=removed)

        selected = [dict(row) for row in rows if self._matches(row)]
        if self.ordering:
            # Postgres default: NULLs last ascending, first descending
            column, desc = self.ordering
            present = sorted((row for row in selected if row.get(column) is not None), key=lambda row: str(row[column]), reverse=desc)
            missing = [row for row in selected if row.get(column) is None]
            selected = missing + present if desc else present + missing
        if self.row_limit is not None:
            selected = selected[:self.row_limit]
        return SimpleNamespace(data=selected)


class FakeSupabase:
    """In-memory stand-in for a supabase Client."""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.fail = False

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class RecordingSound:
    def __init__(self):
        self.is_playing = False
        self.stops = []

    def play(self):
        self.is_playing = True

    def stop(self, fade=True):
        self.stops.append(fade)
        self.is_playing = False


class RecordingSink:
    def __init__(self):
        self.notifications = []
        self.clicks = {}
        self.permission_requests = 0

    def request_permission(self):
        self.permission_requests += 1
        return True

    def notify(self, notification, on_click=None):
        self.notifications.append(notification)
        self.clicks[notification.id] = on_click


class RecordingLinks:
    def __init__(self, result=True):
        self.opened = []
        self.result = result

    def open(self, url):
        self.opened.append(url)
        return self.result


def make_reminder(**overrides) -> Reminder:
    data = {
        "id": "rem-1",
        "contactName": "Asha",
        "phoneNumber": "9876543210",
        "message": "Happy birthday!",
        "time": {"hour": 9, "minute": 0},
        "frequency": "daily",
        "isActive": True,
    }
    data.update(overrides)
    return Reminder.model_validate(data)


@pytest.fixture
def reminder_factory():
    return make_reminder


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 10, 9, 0, 5, tzinfo=timezone.utc))


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def sound():
    return RecordingSound()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def links():
    return RecordingLinks()


@pytest.fixture
def mock_reminder_store():
    """Reminder store whose lastTriggered writes succeed."""
    store = Mock()
    store.mark_triggered = AsyncMock(return_value=True)
    return store
