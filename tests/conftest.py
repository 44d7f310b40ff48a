# Rev 0.1.0

"""Pytest fixtures for fastodo (Rev 0.1.0)"""
from __future__ import annotations
import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set

import pytest
from PySide6.QtCore import QCoreApplication

from fastodo.models.entities import Principal
from fastodo.repositories.db import Database
from fastodo.repositories.remote_store import RemoteStore
from fastodo.repositories.sqlite_remote_store import SQLiteRemoteStore
from fastodo.services.errors import RemoteStoreError
from fastodo.services.note_manager import NoteCollectionManager
from fastodo.services.notifier import Notifier
from fastodo.services.session import SessionProvider
from fastodo.services.task_manager import TaskCollectionManager

ALICE = Principal(id="user-alice", email="alice@example.com")
BOB = Principal(id="user-bob", email="bob@example.com")

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


# --- A tiny in-memory stub store for unit tests -----------------------------

class MemoryStore(RemoteStore):
    """
    Row store kept in dicts. ``fail`` holds operation names ("insert") or
    (operation, table) pairs that raise RemoteStoreError. ``gate``, when set,
    suspends every call until the event is set.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"tasks": [], "notes": [], "folders": []}
        self.fail: Set[Any] = set()
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self._seq = 0

    async def _enter(self, op: str, table: str, *details) -> None:
        self.calls.append((op, table, *details))
        if self.gate is not None:
            await self.gate.wait()
        if op in self.fail or (op, table) in self.fail:
            raise RemoteStoreError(f"{op} on {table} refused")

    def _stamp(self) -> str:
        self._seq += 1
        return (_EPOCH + timedelta(seconds=self._seq)).isoformat()

    def seed(self, table: str, principal_id: str, **row) -> Dict[str, Any]:
        stamp = self._stamp()
        stored = {"id": f"{table[:-1]}-{self._seq}", "user_id": principal_id, "created_at": stamp, **row}
        if table == "notes":
            stored.setdefault("updated_at", stamp)
        if table == "tasks":
            stored.setdefault("description", "")
            stored.setdefault("completed", False)
            stored.setdefault("due_date", None)
            stored.setdefault("priority", "medium")
        if table == "folders":
            stored.setdefault("color", None)
        self.tables[table].append(stored)
        return dict(stored)

    async def select_all(self, table, principal_id, *, order_by="created_at", ascending=True):
        await self._enter("select", table)
        rows = [dict(r) for r in self.tables[table] if r["user_id"] == principal_id]
        return sorted(rows, key=lambda r: r[order_by], reverse=not ascending)

    async def insert(self, table, principal_id, row: Mapping[str, Any]):
        await self._enter("insert", table, dict(row))
        return self.seed(table, principal_id, **dict(row))

    async def update(self, table, principal_id, changes, *, column="id", value):
        await self._enter("update", table, dict(changes), column, value)
        touched = 0
        for r in self.tables[table]:
            if r["user_id"] == principal_id and r.get(column) == value:
                r.update(changes)
                touched += 1
        return touched

    async def delete(self, table, principal_id, row_id):
        await self._enter("delete", table, row_id)
        before = len(self.tables[table])
        self.tables[table] = [r for r in self.tables[table]
                              if not (r["id"] == row_id and r["user_id"] == principal_id)]
        return before - len(self.tables[table])

    def ops(self, op: str, table: Optional[str] = None) -> List[tuple]:
        return [c for c in self.calls if c[0] == op and (table is None or c[1] == table)]


class StubAuth:
    async def create_user(self, email, password):
        return Principal(id=f"user-{email}", email=email)

    async def verify_user(self, email, password):
        return Principal(id=f"user-{email}", email=email)


# --- Fixtures --------------------------------------------------------------

@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture()
def toasts(notifier: Notifier) -> List[tuple]:
    seen: List[tuple] = []
    notifier.notified.connect(lambda level, message: seen.append((level, message)))
    return seen


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def session(notifier: Notifier) -> SessionProvider:
    return SessionProvider(StubAuth(), notifier)


@pytest.fixture()
def task_manager(memory_store, session, notifier) -> TaskCollectionManager:
    return TaskCollectionManager(memory_store, session, notifier)


@pytest.fixture()
def note_manager(memory_store, session, notifier, task_manager) -> NoteCollectionManager:
    mgr = NoteCollectionManager(memory_store, session, notifier, folder_lookup=task_manager.folder)
    task_manager.folderDeleted.connect(mgr.reassign_folder)
    return mgr


@pytest.fixture()
def signed_in(session, task_manager, note_manager) -> Principal:
    """ALICE signed in with empty collections (not yet loaded)."""
    session.set_principal(ALICE)
    return ALICE


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def sqlite_store(db) -> SQLiteRemoteStore:
    return SQLiteRemoteStore(db)
