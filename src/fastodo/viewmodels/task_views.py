# Rev 0.1.0
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from fastodo.models.entities import Task
from fastodo.models.types import PRIORITY_RANK, TASK_SORT_KEYS, CompletionFilter, TaskSortKey


# ---- pure pipeline ----
def scope_tasks(tasks: Iterable[Task], folder_id: Optional[str]) -> List[Task]:
    if folder_id is None:
        return list(tasks)
    return [t for t in tasks if t.folder_id == folder_id]


def filter_tasks_by_completion(tasks: Iterable[Task], completed: CompletionFilter) -> List[Task]:
    if completed is None:
        return list(tasks)
    return [t for t in tasks if t.completed == completed]


def sort_tasks(tasks: Iterable[Task], sort_by: TaskSortKey) -> List[Task]:
    """Stable sort; ``None`` keeps the collection order."""
    if sort_by is None:
        return list(tasks)
    if sort_by == "dueDate":
        # undated tasks go last, in their original relative order
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or date.min))
    if sort_by == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_RANK.get(t.priority, len(PRIORITY_RANK)))
    if sort_by == "title":
        return sorted(tasks, key=lambda t: t.title)
    raise ValueError(f"unknown task sort key {sort_by!r}; expected one of {TASK_SORT_KEYS}")


def search_tasks(tasks: Sequence[Task], query: Optional[str]) -> List[Task]:
    q = (query or "").lower()
    if not q:
        return list(tasks)
    return [t for t in tasks if q in t.title.lower() or q in t.description.lower()]


def derive_task_view(
    tasks: Iterable[Task],
    *,
    folder_id: Optional[str] = None,
    completed: CompletionFilter = None,
    sort_by: TaskSortKey = None,
    query: Optional[str] = None,
) -> List[Task]:
    scoped = scope_tasks(tasks, folder_id)
    filtered = filter_tasks_by_completion(scoped, completed)
    ordered = sort_tasks(filtered, sort_by)
    return search_tasks(ordered, query)


# ---- view model ----
class TaskListViewModel(QObject):
    """
    UI-local view parameters over a TaskCollectionManager.
    Emits:
      - tasksDerived(tasks: list[Task])   on every parameter or collection change
    """

    tasksDerived = Signal(list)

    def __init__(self, manager, *, folder_id: Optional[str] = None,
                 sort_by: TaskSortKey = None, completed: CompletionFilter = None):
        super().__init__()
        self._manager = manager
        self._folder_id = folder_id
        self._completed = completed
        self._sort_by = sort_by
        self._search = ""
        manager.tasksChanged.connect(self._on_tasks_changed)

    # ---- parameters ----
    @property
    def params(self) -> Dict[str, Any]:
        return {
            "folder_id": self._folder_id,
            "completed": self._completed,
            "sort_by": self._sort_by,
            "query": self._search,
        }

    def set_folder(self, folder_id: Optional[str]) -> None:
        self._folder_id = folder_id
        self.reload()

    def set_filter_completed(self, completed: CompletionFilter) -> None:
        self._completed = completed
        self.reload()

    def set_sort(self, sort_by: TaskSortKey) -> None:
        if sort_by is not None and sort_by not in TASK_SORT_KEYS:
            raise ValueError(f"unknown task sort key {sort_by!r}")
        self._sort_by = sort_by
        self.reload()

    def set_search(self, text: Optional[str]) -> None:
        self._search = text or ""
        self.reload()

    # ---- queries ----
    @property
    def items(self) -> List[Task]:
        return derive_task_view(self._manager.tasks, **self.params)

    def reload(self) -> None:
        self.tasksDerived.emit(self.items)

    def _on_tasks_changed(self, _tasks) -> None:
        self.reload()
