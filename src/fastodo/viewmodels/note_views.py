# Rev 0.1.0
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from fastodo.models.entities import Note
from fastodo.models.types import NOTE_SORT_KEYS, NoteSortKey
from fastodo.utils.markup import plain_text


def scope_notes(notes: Iterable[Note], folder_id: Optional[str]) -> List[Note]:
    if folder_id is None:
        return list(notes)
    return [n for n in notes if n.folder_id == folder_id]


def sort_notes(notes: Iterable[Note], sort_by: NoteSortKey) -> List[Note]:
    if sort_by is None:
        return list(notes)
    if sort_by == "updated":
        return sorted(notes, key=lambda n: n.updated_at, reverse=True)
    if sort_by == "created":
        return sorted(notes, key=lambda n: n.created_at, reverse=True)
    if sort_by == "title":
        return sorted(notes, key=lambda n: n.title)
    raise ValueError(f"unknown note sort key {sort_by!r}; expected one of {NOTE_SORT_KEYS}")


def search_notes(notes: Sequence[Note], query: Optional[str]) -> List[Note]:
    """Match title or the note's visible text, not its tags."""
    q = (query or "").lower()
    if not q:
        return list(notes)
    return [n for n in notes if q in n.title.lower() or q in plain_text(n.content).lower()]


def derive_note_view(
    notes: Iterable[Note],
    *,
    folder_id: Optional[str] = None,
    sort_by: NoteSortKey = None,
    query: Optional[str] = None,
) -> List[Note]:
    return search_notes(sort_notes(scope_notes(notes, folder_id), sort_by), query)


def note_preview(note: Note, limit: int = 100) -> str:
    text = plain_text(note.content)
    return text if len(text) <= limit else text[:limit].rstrip() + "..."


class NoteListViewModel(QObject):
    """
    Emits:
      - notesDerived(notes: list[Note])
    """

    notesDerived = Signal(list)

    def __init__(self, manager, *, folder_id: Optional[str] = None, sort_by: NoteSortKey = None):
        super().__init__()
        self._manager = manager
        self._folder_id = folder_id
        self._sort_by = sort_by
        self._search = ""
        manager.notesChanged.connect(self._on_notes_changed)

    def set_folder(self, folder_id: Optional[str]) -> None:
        self._folder_id = folder_id
        self.reload()

    def set_sort(self, sort_by: NoteSortKey) -> None:
        if sort_by is not None and sort_by not in NOTE_SORT_KEYS:
            raise ValueError(f"unknown note sort key {sort_by!r}")
        self._sort_by = sort_by
        self.reload()

    def set_search(self, text: Optional[str]) -> None:
        self._search = text or ""
        self.reload()

    @property
    def items(self) -> List[Note]:
        return derive_note_view(
            self._manager.notes, folder_id=self._folder_id, sort_by=self._sort_by, query=self._search
        )

    def reload(self) -> None:
        self.notesDerived.emit(self.items)

    def _on_notes_changed(self, _notes) -> None:
        self.reload()
