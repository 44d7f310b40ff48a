# Rev 0.1.0
"""Entities for the tasks/notes/folders tables.

Entities are frozen; managers derive new ones with ``dataclasses.replace``.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .types import Priority


@dataclass(frozen=True)
class Principal:
    id: str
    email: str


@dataclass(frozen=True)
class Folder:
    id: str
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    folder_id: str
    created_at: datetime
    description: str = ""
    completed: bool = False
    due_date: Optional[date] = None    # date only, no time component
    priority: Priority = "medium"


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    folder_id: str
    created_at: datetime
    updated_at: datetime
    content: str = ""                  # sanitized markup
