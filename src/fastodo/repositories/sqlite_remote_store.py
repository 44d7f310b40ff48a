# Rev 0.1.0
from __future__ import annotations

import asyncio
import hashlib
import hmac
import secrets
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from fastodo.models.entities import Principal
from fastodo.models.types import Table
from fastodo.repositories.db import Database
from fastodo.repositories.remote_store import TABLE_COLUMNS, RemoteStore
from fastodo.services.errors import AuthenticationError, RemoteStoreError
from fastodo.utils.logging_setup import get_logger

T = TypeVar("T")

# Columns the store owns; callers never write them directly
STORE_MANAGED = frozenset({"id", "user_id", "created_at"})
TIMESTAMP_COLUMNS = frozenset({"created_at", "updated_at"})

PBKDF2_ITERATIONS = 200_000
MIN_PASSWORD_LENGTH = 6


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS)
    return digest.hex()


class SQLiteRemoteStore(RemoteStore):
    """
    Principal-scoped row store over SQLite.
    Every statement filters on user_id, so one principal can never read or
    touch another principal's rows. Blocking sqlite calls run in a worker
    thread; a lock serializes use of the single connection.
    """

    def __init__(self, db_or_conn: Database | sqlite3.Connection):
        self._db_or_conn = db_or_conn
        self._lock = threading.Lock()
        self._log = get_logger("SQLiteRemoteStore")

    # -------------------------
    # Connection handling
    # -------------------------
    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        return self._db_or_conn.conn

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        def locked() -> T:
            with self._lock:
                try:
                    return fn(*args)
                except sqlite3.Error as e:
                    raise RemoteStoreError(f"{fn.__name__}: {e}") from e
        return await asyncio.to_thread(locked)

    @staticmethod
    def _row_to_dict(table: str, row: sqlite3.Row) -> Dict[str, Any]:
        d = {k: row[k] for k in row.keys()}
        if table == "tasks":
            d["completed"] = bool(d.get("completed"))
        return d

    @staticmethod
    def _check_table(table: str) -> tuple[str, ...]:
        cols = TABLE_COLUMNS.get(table)
        if cols is None:
            raise RemoteStoreError(f"unknown table {table!r}")
        return cols

    @classmethod
    def _check_columns(cls, table: str, names) -> None:
        cols = cls._check_table(table)
        bad = [n for n in names if n not in cols]
        if bad:
            raise RemoteStoreError(f"unknown column(s) for {table}: {', '.join(bad)}")

    # -------------------------
    # Table operations
    # -------------------------
    def _select_all(self, table: str, principal_id: str, order_by: str, ascending: bool) -> List[Dict[str, Any]]:
        self._check_table(table)
        if order_by not in TIMESTAMP_COLUMNS or order_by not in TABLE_COLUMNS[table]:
            raise RemoteStoreError(f"cannot order {table} by {order_by!r}")
        direction = "ASC" if ascending else "DESC"
        cur = self._conn().execute(
            f"SELECT * FROM {table} WHERE user_id = ? ORDER BY {order_by} {direction}, rowid {direction}",
            (principal_id,),
        )
        return [self._row_to_dict(table, r) for r in cur.fetchall()]

    def _insert(self, table: str, principal_id: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in row.items() if k not in STORE_MANAGED}
        self._check_columns(table, values)
        now = _now_iso()
        values["id"] = uuid.uuid4().hex
        values["user_id"] = principal_id
        values["created_at"] = now
        if table == "notes":
            values.setdefault("updated_at", now)
        names = list(values)
        con = self._conn()
        con.execute(
            f"INSERT INTO {table}({', '.join(names)}) VALUES ({', '.join('?' for _ in names)})",
            [values[n] for n in names],
        )
        stored = con.execute(f"SELECT * FROM {table} WHERE id = ?", (values["id"],)).fetchone()
        return self._row_to_dict(table, stored)

    def _update(self, table: str, principal_id: str, changes: Mapping[str, Any], column: str, value: Any) -> int:
        self._check_columns(table, list(changes) + [column])
        locked = STORE_MANAGED.intersection(changes)
        if locked:
            raise RemoteStoreError(f"cannot update {', '.join(sorted(locked))} on {table}")
        if not changes:
            return 0
        sets = ", ".join(f"{k} = ?" for k in changes)
        cur = self._conn().execute(
            f"UPDATE {table} SET {sets} WHERE {column} = ? AND user_id = ?",
            (*changes.values(), value, principal_id),
        )
        return cur.rowcount

    def _delete(self, table: str, principal_id: str, row_id: str) -> int:
        self._check_table(table)
        cur = self._conn().execute(
            f"DELETE FROM {table} WHERE id = ? AND user_id = ?", (row_id, principal_id)
        )
        return cur.rowcount

    async def select_all(self, table: Table, principal_id: str, *, order_by: str = "created_at",
                         ascending: bool = True) -> List[Dict[str, Any]]:
        return await self._run(self._select_all, table, principal_id, order_by, ascending)

    async def insert(self, table: Table, principal_id: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._run(self._insert, table, principal_id, dict(row))

    async def update(self, table: Table, principal_id: str, changes: Mapping[str, Any], *,
                     column: str = "id", value: Any) -> int:
        return await self._run(self._update, table, principal_id, dict(changes), column, value)

    async def delete(self, table: Table, principal_id: str, row_id: str) -> int:
        return await self._run(self._delete, table, principal_id, row_id)

    # -------------------------
    # Accounts
    # -------------------------
    def _create_user(self, email: str, password: str) -> Principal:
        email = (email or "").strip()
        if "@" not in email:
            raise AuthenticationError("Invalid email address")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        salt = secrets.token_hex(16)
        user_id = uuid.uuid4().hex
        try:
            self._conn().execute(
                "INSERT INTO users(id, email, password_hash, salt, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, email, _hash_password(password, salt), salt, _now_iso()),
            )
        except sqlite3.IntegrityError as e:
            raise AuthenticationError("User already registered") from e
        self._log.info("Created user %s", email)
        return Principal(id=user_id, email=email)

    def _verify_user(self, email: str, password: str) -> Principal:
        row: Optional[sqlite3.Row] = self._conn().execute(
            "SELECT id, email, password_hash, salt FROM users WHERE email = ?", ((email or "").strip(),)
        ).fetchone()
        if row is None or not hmac.compare_digest(row["password_hash"], _hash_password(password or "", row["salt"])):
            raise AuthenticationError("Invalid login credentials")
        return Principal(id=row["id"], email=row["email"])

    async def create_user(self, email: str, password: str) -> Principal:
        return await self._run(self._create_user, email, password)

    async def verify_user(self, email: str, password: str) -> Principal:
        return await self._run(self._verify_user, email, password)
