# Rev 0.1.0
from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Tuple

from PySide6.QtCore import Signal

from fastodo.models.entities import Folder, Task
from fastodo.models.rows import format_timestamp, row_to_folder, row_to_task, to_row_values, utc_now
from fastodo.models.types import DEFAULT_PRIORITY, PRIORITIES, Priority
from fastodo.models.updates import TaskUpdate
from fastodo.repositories.remote_store import RemoteStore
from fastodo.services.errors import InvariantViolation, RemoteStoreError, require_text
from fastodo.services.notifier import Notifier
from fastodo.services.session import SessionProvider
from fastodo.services.session_bound import SessionBoundManager

DEFAULT_FOLDER_ID = "default"
DEFAULT_FOLDER_NAME = "My Tasks"
SEED_FOLDER_NAMES: Tuple[str, ...] = ("Work", "Personal")

WELCOME_TASK = {
    "title": "Welcome to Fastodo!",
    "description": "This is your first task. Try marking it as complete!",
    "completed": False,
    "priority": "medium",
}


def _check_priority(priority: str) -> None:
    if priority not in PRIORITIES:
        raise InvariantViolation(f"unknown priority {priority!r}")


class TaskCollectionManager(SessionBoundManager):
    """
    In-memory owner of the current principal's tasks and folders.

    Mutations are pessimistic: the store is called first and local state is
    replaced (never edited in place) only after it succeeds.

    Emits:
      - tasksChanged(tasks: list[Task])
      - foldersChanged(folders: list[Folder])
      - loadingChanged(loading: bool)
      - folderDeleted(folder_id: str, default_folder_id: str)
    """

    tasksChanged = Signal(list)
    foldersChanged = Signal(list)
    folderDeleted = Signal(str, str)

    def __init__(self, store: RemoteStore, session: SessionProvider, notifier: Notifier,
                 *, default_folder_name: str = DEFAULT_FOLDER_NAME):
        super().__init__(store, session, notifier, "TaskManager")
        self._tasks: Tuple[Task, ...] = ()
        self._folders: Tuple[Folder, ...] = ()
        self._default_folder_name = default_folder_name

    # ---- read side ----
    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._tasks

    @property
    def folders(self) -> Tuple[Folder, ...]:
        return self._folders

    def task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self._folders if f.id == folder_id), None)

    def get_tasks_by_folder(self, folder_id: str) -> list[Task]:
        return [t for t in self._tasks if t.folder_id == folder_id]

    def default_folder(self) -> Optional[Folder]:
        named = next((f for f in self._folders if f.name == self._default_folder_name), None)
        if named is not None:
            return named
        return self._folders[0] if self._folders else None

    def is_default_folder(self, folder_id: str) -> bool:
        if folder_id == DEFAULT_FOLDER_ID:
            return True
        default = self.default_folder()
        return default is not None and default.id == folder_id

    # ---- state replacement ----
    def _set_tasks(self, tasks) -> None:
        self._tasks = tuple(tasks)
        self.tasksChanged.emit(list(self._tasks))

    def _set_folders(self, folders) -> None:
        self._folders = tuple(folders)
        self.foldersChanged.emit(list(self._folders))

    def _reset(self) -> None:
        self._set_tasks(())
        self._set_folders(())

    # ---- load ----
    async def _load(self) -> None:
        scope = self._scope()
        if scope is None:
            self._reset()
            self._set_loading(False)
            return
        principal_id = scope[0]
        self._set_loading(True)
        try:
            folder_rows = await self._store.select_all("folders", principal_id, order_by="created_at", ascending=True)
            if not folder_rows:
                folder_rows = await self._seed_folders(principal_id)

            task_rows = await self._store.select_all("tasks", principal_id, order_by="created_at", ascending=False)
            if not task_rows and folder_rows:
                task_rows = await self._seed_welcome_task(principal_id, folder_rows[0]["id"])

            folders = [row_to_folder(r) for r in folder_rows]
            tasks = [row_to_task(r) for r in task_rows]
        except RemoteStoreError:
            if self._is_current(scope):
                self._fail("fetching tasks", "Failed to load your tasks")
                self._set_loading(False)
            return

        if not self._is_current(scope):
            self._log.debug("Discarding task fetch for a previous session")
            return
        self._set_folders(folders)
        self._set_tasks(tasks)
        self._set_loading(False)
        self._log.info("Loaded %d folders, %d tasks", len(folders), len(tasks))

    async def _seed_folders(self, principal_id: str) -> list[dict]:
        for name in (self._default_folder_name, *SEED_FOLDER_NAMES):
            await self._store.insert("folders", principal_id, {"name": name})
        self._log.info("Seeded default folders")
        return await self._store.select_all("folders", principal_id, order_by="created_at", ascending=True)

    async def _seed_welcome_task(self, principal_id: str, folder_id: str) -> list[dict]:
        row = to_row_values({**WELCOME_TASK, "due_date": date.today(), "folder_id": folder_id})
        await self._store.insert("tasks", principal_id, row)
        self._log.info("Seeded welcome task")
        return await self._store.select_all("tasks", principal_id, order_by="created_at", ascending=False)

    def _require_folder(self, folder_id: str) -> None:
        if self.folder(folder_id) is None:
            raise InvariantViolation(f"unknown folder {folder_id!r}")

    # ---- task commands ----
    async def add_task(
        self,
        *,
        title: str,
        folder_id: str,
        description: str = "",
        completed: bool = False,
        due_date: Optional[date] = None,
        priority: Priority = DEFAULT_PRIORITY,
    ) -> Optional[Task]:
        scope = self._scope()
        if scope is None:
            return None
        require_text(title, "title")
        require_text(folder_id, "folder")
        self._require_folder(folder_id)
        _check_priority(priority)

        row = to_row_values({
            "title": title,
            "description": description or "",
            "completed": bool(completed),
            "due_date": due_date,
            "priority": priority,
            "folder_id": folder_id,
        })
        try:
            stored = await self._store.insert("tasks", scope[0], row)
        except RemoteStoreError:
            self._fail("adding task", "Failed to add task")
            return None

        task = row_to_task(stored)
        if not self._is_current(scope):
            return None
        self._set_tasks((task, *self._tasks))
        self._notifier.success("Task added successfully")
        return task

    async def update_task(self, task_id: str, update: TaskUpdate) -> bool:
        scope = self._scope()
        if scope is None or update.is_empty():
            return False
        if update.is_set("title"):
            require_text(update.title, "title")
        if update.is_set("folder_id"):
            require_text(update.folder_id, "folder")
            self._require_folder(update.folder_id)
        if update.is_set("priority"):
            _check_priority(update.priority)
        if self.task(task_id) is None:
            self._log.debug("update_task: %s not loaded", task_id)
            return False

        try:
            await self._store.update("tasks", scope[0], to_row_values(update.changes()), value=task_id)
        except RemoteStoreError:
            self._fail("updating task", "Failed to update task")
            return False

        if not self._is_current(scope):
            return False
        self._set_tasks(update.apply_to(t) if t.id == task_id else t for t in self._tasks)
        self._notifier.success("Task updated successfully")
        return True

    async def delete_task(self, task_id: str) -> bool:
        return await self._remove_task(task_id, "deleting task", "Task deleted successfully", "Failed to delete task")

    async def archive_task(self, task_id: str) -> bool:
        # Archiving removes the row; there is no archived state to return to.
        return await self._remove_task(task_id, "archiving task", "Task archived successfully", "Failed to archive task")

    async def _remove_task(self, task_id: str, action: str, ok_message: str, fail_message: str) -> bool:
        scope = self._scope()
        if scope is None:
            return False
        try:
            await self._store.delete("tasks", scope[0], task_id)
        except RemoteStoreError:
            self._fail(action, fail_message)
            return False

        if not self._is_current(scope):
            return False
        self._set_tasks(t for t in self._tasks if t.id != task_id)
        self._notifier.success(ok_message)
        return True

    async def toggle_complete(self, task_id: str) -> bool:
        scope = self._scope()
        if scope is None:
            return False
        task = self.task(task_id)
        if task is None:
            return False
        completed = not task.completed
        try:
            await self._store.update("tasks", scope[0], {"completed": completed}, value=task_id)
        except RemoteStoreError:
            self._fail("toggling task completion", "Failed to update task")
            return False

        if not self._is_current(scope):
            return False
        self._set_tasks(replace(t, completed=completed) if t.id == task_id else t for t in self._tasks)
        return True

    def reorder_tasks(self, from_index: int, to_index: int) -> bool:
        """Move one task within the session-local order (never persisted)."""
        if self._scope() is None:
            return False
        if from_index < 0 or to_index < 0 or from_index >= len(self._tasks):
            return False
        items = list(self._tasks)
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        self._set_tasks(items)
        return True

    # ---- folder commands ----
    async def add_folder(self, name: str, color: Optional[str] = None) -> Optional[Folder]:
        scope = self._scope()
        if scope is None:
            return None
        require_text(name, "folder name")
        try:
            stored = await self._store.insert("folders", scope[0], {"name": name, "color": color})
        except RemoteStoreError:
            self._fail("adding folder", "Failed to create folder")
            return None

        folder = row_to_folder(stored)
        if not self._is_current(scope):
            return None
        self._set_folders((*self._folders, folder))
        self._notifier.success("Folder created successfully")
        return folder

    async def update_folder(self, folder_id: str, name: str, color: Optional[str] = None) -> bool:
        scope = self._scope()
        if scope is None:
            return False
        require_text(name, "folder name")
        if self.folder(folder_id) is None:
            return False
        try:
            await self._store.update("folders", scope[0], {"name": name, "color": color}, value=folder_id)
        except RemoteStoreError:
            self._fail("updating folder", "Failed to update folder")
            return False

        if not self._is_current(scope):
            return False
        self._set_folders(replace(f, name=name, color=color) if f.id == folder_id else f for f in self._folders)
        self._notifier.success("Folder updated successfully")
        return True

    async def delete_folder(self, folder_id: str) -> bool:
        """
        Delete a non-default folder, moving its tasks and notes to the
        default folder first. The default folder itself is never deleted.
        """
        scope = self._scope()
        if scope is None or self.is_default_folder(folder_id):
            return False

        default = self.default_folder()
        if default is None:
            self._notifier.error("Cannot delete folder: No default folder exists")
            return False
        if self.folder(folder_id) is None:
            return False

        principal_id = scope[0]
        moved_at = format_timestamp(utc_now())
        try:
            await self._store.update("tasks", principal_id, {"folder_id": default.id},
                                     column="folder_id", value=folder_id)
            await self._store.update("notes", principal_id, {"folder_id": default.id, "updated_at": moved_at},
                                     column="folder_id", value=folder_id)
            await self._store.delete("folders", principal_id, folder_id)
        except RemoteStoreError:
            self._fail("deleting folder", "Failed to delete folder")
            return False

        if not self._is_current(scope):
            return False
        self._set_folders(f for f in self._folders if f.id != folder_id)
        self._set_tasks(
            replace(t, folder_id=default.id) if t.folder_id == folder_id else t for t in self._tasks
        )
        self.folderDeleted.emit(folder_id, default.id)
        self._notifier.success("Folder deleted successfully")
        return True
