# Rev 0.1.0
"""Remote store contract.

Three row-level tables, every row owned by a principal (``user_id``):

    tasks(id, title, description, completed, due_date, priority, folder_id, user_id, created_at)
    notes(id, title, content, folder_id, user_id, created_at, updated_at)
    folders(id, name, color, user_id, created_at)

Implementations raise RemoteStoreError for every failure.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from fastodo.models.types import Table

TABLE_COLUMNS: Dict[str, tuple[str, ...]] = {
    "tasks": ("id", "title", "description", "completed", "due_date", "priority",
              "folder_id", "user_id", "created_at"),
    "notes": ("id", "title", "content", "folder_id", "user_id", "created_at", "updated_at"),
    "folders": ("id", "name", "color", "user_id", "created_at"),
}


class RemoteStore(ABC):
    @abstractmethod
    async def select_all(
        self, table: Table, principal_id: str, *, order_by: str = "created_at", ascending: bool = True
    ) -> List[Dict[str, Any]]:
        """All rows of ``table`` owned by the principal, ordered by a timestamp column."""

    @abstractmethod
    async def insert(self, table: Table, principal_id: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row owned by the principal; returns the stored row."""

    @abstractmethod
    async def update(
        self, table: Table, principal_id: str, changes: Mapping[str, Any], *, column: str = "id", value: Any
    ) -> int:
        """Apply ``changes`` to rows where ``column == value``; returns rows touched."""

    @abstractmethod
    async def delete(self, table: Table, principal_id: str, row_id: str) -> int:
        """Delete by id; returns rows removed."""
