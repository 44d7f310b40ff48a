# fastodo type definitions
# Rev 0.1.0

from __future__ import annotations
from typing import Dict, Literal, Optional

Priority = Literal["low", "medium", "high"]
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY: Priority = "medium"

# Sort rank: lower sorts first
PRIORITY_RANK: Dict[str, int] = {"high": 0, "medium": 1, "low": 2}

# None means "default" (keep collection order)
TaskSortKey = Optional[Literal["dueDate", "priority", "title"]]
NoteSortKey = Optional[Literal["updated", "created", "title"]]

# None → all, False → active, True → completed
CompletionFilter = Optional[bool]

TASK_SORT_KEYS: tuple[str, ...] = ("dueDate", "priority", "title")
NOTE_SORT_KEYS: tuple[str, ...] = ("updated", "created", "title")

# Remote tables
Table = Literal["tasks", "notes", "folders"]
