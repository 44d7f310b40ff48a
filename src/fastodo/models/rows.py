# Rev 0.1.0
"""Store row <-> entity conversion.

Rows are plain dicts keyed by column name (tasks/notes/folders tables).
"""
from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .entities import Folder, Note, Task
from .types import DEFAULT_PRIORITY, PRIORITIES


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s.replace(" ", "T", 1))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_due_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # accepts "YYYY-MM-DD" and full ISO timestamps written by older clients
    return date.fromisoformat(str(value)[:10])


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# Rows -> entities
# -------------------------
def row_to_folder(row: Mapping[str, Any]) -> Folder:
    return Folder(id=str(row["id"]), name=row["name"], color=row.get("color") or None)


def row_to_task(row: Mapping[str, Any]) -> Task:
    priority = row.get("priority")
    return Task(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description") or "",
        completed=bool(row.get("completed") or False),
        due_date=parse_due_date(row.get("due_date")),
        priority=priority if priority in PRIORITIES else DEFAULT_PRIORITY,
        folder_id=row["folder_id"],
        created_at=parse_timestamp(row["created_at"]),
    )


def row_to_note(row: Mapping[str, Any]) -> Note:
    return Note(
        id=str(row["id"]),
        title=row["title"],
        content=row.get("content") or "",
        folder_id=row["folder_id"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


# -------------------------
# Entity fields -> row values
# -------------------------
def to_row_values(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert entity attribute values to column values.

    Attribute and column names coincide; only dates and timestamps change
    representation.
    """
    out: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            out[key] = format_timestamp(value)
        elif isinstance(value, date):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out
