# fastodo application context
# Rev 0.1.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .repositories.db import Database
from .repositories.sqlite_remote_store import SQLiteRemoteStore
from .services.notifier import Notifier
from .services.session import SessionProvider
from .services.task_manager import TaskCollectionManager
from .services.note_manager import NoteCollectionManager
from .viewmodels.task_views import TaskListViewModel
from .viewmodels.note_views import NoteListViewModel


@dataclass
class AppContext:
    """Central container for shared app services, built once per process."""
    db: Database
    store: SQLiteRemoteStore
    notifier: Notifier
    session: SessionProvider
    tasks: TaskCollectionManager
    notes: NoteCollectionManager
    task_view: TaskListViewModel
    note_view: NoteListViewModel
    settings: Dict[str, Any]

    @classmethod
    def create(cls, db_path: Optional[Path | str] = None,
               settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Open the DB, run migrations, wire services and view models."""
        log = get_logger("AppContext")
        settings = settings if settings is not None else load_settings()
        views = settings.get("views", {})

        db = Database(db_path)
        db.run_migrations()
        store = SQLiteRemoteStore(db)
        notifier = Notifier()
        session = SessionProvider(store, notifier)
        tasks = TaskCollectionManager(
            store, session, notifier,
            default_folder_name=settings.get("folders", {}).get("default_name", "My Tasks"),
        )
        notes = NoteCollectionManager(store, session, notifier, folder_lookup=tasks.folder)
        tasks.folderDeleted.connect(notes.reassign_folder)

        task_view = TaskListViewModel(
            tasks, sort_by=views.get("task_sort"), completed=views.get("task_filter_completed"),
        )
        note_view = NoteListViewModel(notes, sort_by=views.get("note_sort"))

        log.info("AppContext initialized with DB=%s", db.path)
        return cls(db=db, store=store, notifier=notifier, session=session, tasks=tasks,
                   notes=notes, task_view=task_view, note_view=note_view, settings=settings)

    async def refresh(self) -> None:
        """Load both collections for the current principal."""
        await self.tasks.load()
        await self.notes.load()

    def close(self) -> None:
        self.db.close()
