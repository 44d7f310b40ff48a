# Rev 0.1.0
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional, Tuple

from PySide6.QtCore import Signal

from fastodo.models.entities import Folder, Note
from fastodo.models.rows import row_to_note, to_row_values, utc_now
from fastodo.models.updates import NoteUpdate
from fastodo.repositories.remote_store import RemoteStore
from fastodo.services.errors import InvariantViolation, RemoteStoreError, require_text
from fastodo.services.notifier import Notifier
from fastodo.services.session import SessionProvider
from fastodo.services.session_bound import SessionBoundManager
from fastodo.utils.markup import sanitize_markup


class NoteCollectionManager(SessionBoundManager):
    """
    In-memory owner of the current principal's notes.
    ``folder_lookup`` resolves a folder id against the loaded folders; notes
    may only be filed under a folder it knows.
    Emits:
      - notesChanged(notes: list[Note])
      - loadingChanged(loading: bool)
    """

    notesChanged = Signal(list)

    def __init__(self, store: RemoteStore, session: SessionProvider, notifier: Notifier,
                 folder_lookup: Callable[[str], Optional[Folder]]):
        super().__init__(store, session, notifier, "NoteManager")
        self._notes: Tuple[Note, ...] = ()
        self._folder_lookup = folder_lookup

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self._notes

    def note(self, note_id: str) -> Optional[Note]:
        return next((n for n in self._notes if n.id == note_id), None)

    def get_notes_by_folder(self, folder_id: str) -> list[Note]:
        return [n for n in self._notes if n.folder_id == folder_id]

    def _require_folder(self, folder_id: str) -> None:
        if self._folder_lookup(folder_id) is None:
            raise InvariantViolation(f"unknown folder {folder_id!r}")

    def _set_notes(self, notes) -> None:
        self._notes = tuple(notes)
        self.notesChanged.emit(list(self._notes))

    def _reset(self) -> None:
        self._set_notes(())

    async def _load(self) -> None:
        scope = self._scope()
        if scope is None:
            self._reset()
            self._set_loading(False)
            return
        self._set_loading(True)
        try:
            rows = await self._store.select_all("notes", scope[0], order_by="updated_at", ascending=False)
            notes = [row_to_note(r) for r in rows]
        except RemoteStoreError:
            if self._is_current(scope):
                self._fail("fetching notes", "Failed to load notes")
                self._set_loading(False)
            return

        if not self._is_current(scope):
            self._log.debug("Discarding note fetch for a previous session")
            return
        self._set_notes(notes)
        self._set_loading(False)
        self._log.info("Loaded %d notes", len(notes))

    async def add_note(self, *, title: str, folder_id: str, content: str = "") -> Optional[Note]:
        scope = self._scope()
        if scope is None:
            return None
        require_text(title, "title")
        require_text(folder_id, "folder")
        self._require_folder(folder_id)
        row = {"title": title, "content": sanitize_markup(content), "folder_id": folder_id}
        try:
            stored = await self._store.insert("notes", scope[0], row)
        except RemoteStoreError:
            self._fail("adding note", "Failed to create note")
            return None

        note = row_to_note(stored)
        if not self._is_current(scope):
            return None
        self._set_notes((note, *self._notes))
        self._notifier.success("Note created successfully")
        return note

    async def update_note(self, note_id: str, update: NoteUpdate) -> bool:
        """Apply ``update`` and stamp a fresh updated_at, even for an empty update."""
        scope = self._scope()
        if scope is None:
            return False
        if update.is_set("title"):
            require_text(update.title, "title")
        if update.is_set("folder_id"):
            require_text(update.folder_id, "folder")
            self._require_folder(update.folder_id)
        if update.is_set("content"):
            update = replace(update, content=sanitize_markup(update.content))
        if self.note(note_id) is None:
            self._log.debug("update_note: %s not loaded", note_id)
            return False

        stamped = utc_now()
        changes = to_row_values({**update.changes(), "updated_at": stamped})
        try:
            await self._store.update("notes", scope[0], changes, value=note_id)
        except RemoteStoreError:
            self._fail("updating note", "Failed to update note")
            return False

        if not self._is_current(scope):
            return False
        self._set_notes(
            replace(update.apply_to(n), updated_at=stamped) if n.id == note_id else n for n in self._notes
        )
        self._notifier.success("Note updated successfully")
        return True

    async def delete_note(self, note_id: str) -> bool:
        scope = self._scope()
        if scope is None:
            return False
        try:
            await self._store.delete("notes", scope[0], note_id)
        except RemoteStoreError:
            self._fail("deleting note", "Failed to delete note")
            return False

        if not self._is_current(scope):
            return False
        self._set_notes(n for n in self._notes if n.id != note_id)
        self._notifier.success("Note deleted successfully")
        return True

    def reassign_folder(self, old_folder_id: str, new_folder_id: str) -> None:
        """Local rewrite after a folder deletion already moved the rows remotely."""
        if not any(n.folder_id == old_folder_id for n in self._notes):
            return
        moved_at = utc_now()
        self._set_notes(
            replace(n, folder_id=new_folder_id, updated_at=moved_at) if n.folder_id == old_folder_id else n
            for n in self._notes
        )
