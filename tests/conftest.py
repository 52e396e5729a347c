from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from paycal.attendance_store import AttendanceStore
from paycal.config import Settings
from paycal.local_storage import LocalStorage
from paycal.settlement_repository import SettlementRepository
from paycal.special_days import load_special_days


@dataclass
class FakeResponse:
    data: list


class FakeQuery:
    """Just enough of the supabase query builder for salary_settlements."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self._op = None
        self._row = None
        self._on_conflict = None
        self._filters = []
        self._order = None

    def upsert(self, row: dict, on_conflict: str = ""):
        self._op = "upsert"
        self._row = dict(row)
        self._on_conflict = [c for c in on_conflict.split(",") if c]
        return self

    def select(self, columns: str = "*"):
        self._op = "select"
        return self

    def eq(self, column: str, value):
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self._order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        if self.db.error is not None:
            raise self.db.error
        rows = self.db.tables.setdefault(self.table, [])

        if self._op == "upsert":
            self.db.upsert_calls.append((self._row, self._on_conflict))
            for existing in rows:
                if self._on_conflict and all(existing[c] == self._row[c] for c in self._on_conflict):
                    existing.update(self._row)
                    return FakeResponse(data=[dict(existing)])
            new_row = {"id": str(uuid.uuid4()), **self._row}
            rows.append(new_row)
            return FakeResponse(data=[dict(new_row)])

        result = [dict(r) for r in rows if all(r.get(c) == v for c, v in self._filters)]
        if self._order:
            column, desc = self._order
            result.sort(key=lambda r: r[column], reverse=desc)
        return FakeResponse(data=result)


@dataclass
class FakeSupabase:
    tables: dict = field(default_factory=dict)
    upsert_calls: list = field(default_factory=list)
    error: Optional[Exception] = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def special_days():
    return load_special_days()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def store(storage):
    return AttendanceStore(storage)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def repository(fake_supabase):
    return SettlementRepository(fake_supabase)


@pytest.fixture
def local_settings(tmp_path):
    return Settings(
        supabase_url=None,
        supabase_key=None,
        storage_path=str(tmp_path / "storage.json"),
        special_days_path=None,
    )


@pytest.fixture
def client(local_settings, store, repository, special_days):
    app = create_app(settings=local_settings, store=store, repository=repository, special_days=special_days)
    return TestClient(app)


@pytest.fixture
def local_only_client(local_settings, store, special_days):
    app = create_app(settings=local_settings, store=store, special_days=special_days)
    return TestClient(app)


@pytest.fixture
def mark_days(store):
    """Mark days 1..count of a 2026 month."""

    def _mark(month: int, count: int):
        for day in range(1, count + 1):
            store.toggle(f"2026-{month:02d}-{day:02d}")

    return _mark
