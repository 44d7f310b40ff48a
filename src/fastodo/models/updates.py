# Rev 0.1.0
"""Explicit partial-update structures.

Every field defaults to ``UNSET``; a field set to anything else (``None``
included, where the column is nullable) is part of the update.
"""
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Dict, Optional, TypeVar, Union

from .types import Priority


class _Unset:
    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

E = TypeVar("E")


class _PartialUpdate:
    def changes(self) -> Dict[str, Any]:
        """Present fields only, keyed by entity attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not UNSET

    def apply_to(self, entity: E) -> E:
        return replace(entity, **self.changes())  # type: ignore[type-var]


@dataclass(frozen=True)
class TaskUpdate(_PartialUpdate):
    title: Union[str, _Unset] = UNSET
    description: Union[str, _Unset] = UNSET
    completed: Union[bool, _Unset] = UNSET
    due_date: Union[Optional[date], _Unset] = UNSET
    priority: Union[Priority, _Unset] = UNSET
    folder_id: Union[str, _Unset] = UNSET


@dataclass(frozen=True)
class NoteUpdate(_PartialUpdate):
    title: Union[str, _Unset] = UNSET
    content: Union[str, _Unset] = UNSET
    folder_id: Union[str, _Unset] = UNSET
