# Rev 0.1.0
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from fastodo.models.entities import Note, Task

ProgressLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class FolderProgress:
    completed: int
    total: int
    note_count: int
    percent: float
    level: ProgressLevel


def progress_level(percent: float) -> ProgressLevel:
    if percent < 33:
        return "low"
    if percent < 66:
        return "medium"
    return "high"


def folder_progress(tasks: Iterable[Task], notes: Iterable[Note], folder_id: str) -> FolderProgress:
    in_folder = [t for t in tasks if t.folder_id == folder_id]
    done = sum(1 for t in in_folder if t.completed)
    total = len(in_folder)
    percent = (done / total) * 100 if total else 0.0
    return FolderProgress(
        completed=done,
        total=total,
        note_count=sum(1 for n in notes if n.folder_id == folder_id),
        percent=percent,
        level=progress_level(percent),
    )
