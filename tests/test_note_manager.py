# tests/test_note_manager.py
from __future__ import annotations

import asyncio

import pytest

from fastodo.models.updates import NoteUpdate
from fastodo.services.errors import InvariantViolation

from conftest import ALICE


@pytest.fixture()
def folders(memory_store, signed_in, task_manager):
    """Folder ids by short name, loaded into the task manager."""
    ids = {
        "f1": memory_store.seed("folders", ALICE.id, name="My Tasks")["id"],
        "f2": memory_store.seed("folders", ALICE.id, name="Ideas")["id"],
    }
    asyncio.run(task_manager.load())
    return ids


@pytest.fixture()
def loaded_notes(memory_store, folders, note_manager):
    memory_store.seed("notes", ALICE.id, title="old", folder_id=folders["f1"], content="<p>first</p>")
    memory_store.seed("notes", ALICE.id, title="new", folder_id=folders["f2"], content="")
    asyncio.run(note_manager.load())
    memory_store.calls.clear()
    return note_manager


def test_load_orders_by_updated_desc(loaded_notes):
    assert [n.title for n in loaded_notes.notes] == ["new", "old"]
    assert loaded_notes.loading is False


def test_load_failure(memory_store, signed_in, note_manager, toasts):
    memory_store.fail.add("select")
    asyncio.run(note_manager.load())
    assert note_manager.notes == ()
    assert ("error", "Failed to load notes") in toasts


def test_add_note_sanitizes_and_prepends(loaded_notes, folders, memory_store, toasts):
    note = asyncio.run(loaded_notes.add_note(
        title="plan", folder_id=folders["f1"], content='<b>go</b><script>alert(1)</script>',
    ))
    assert note.content == "<b>go</b>"
    assert loaded_notes.notes[0] == note
    (_, _, row), = memory_store.ops("insert", "notes")
    assert row["content"] == "<b>go</b>"
    assert ("success", "Note created successfully") in toasts


def test_add_note_failure(loaded_notes, folders, memory_store, toasts):
    memory_store.fail.add("insert")
    assert asyncio.run(loaded_notes.add_note(title="x", folder_id=folders["f1"])) is None
    assert len(loaded_notes.notes) == 2
    assert ("error", "Failed to create note") in toasts


def test_add_note_blank_title_rejected(loaded_notes, folders, memory_store):
    with pytest.raises(InvariantViolation):
        asyncio.run(loaded_notes.add_note(title="", folder_id=folders["f1"]))
    assert memory_store.calls == []


def test_add_note_unknown_folder_rejected(loaded_notes, memory_store):
    with pytest.raises(InvariantViolation, match="unknown folder"):
        asyncio.run(loaded_notes.add_note(title="x", folder_id="no-such-folder"))
    assert memory_store.ops("insert") == []
    assert len(loaded_notes.notes) == 2


def test_move_note_to_unknown_folder_rejected(loaded_notes, memory_store):
    target = loaded_notes.notes[0]
    with pytest.raises(InvariantViolation, match="unknown folder"):
        asyncio.run(loaded_notes.update_note(target.id, NoteUpdate(folder_id="ghost")))
    assert memory_store.ops("update") == []
    assert loaded_notes.note(target.id) == target


def test_update_note_stamps_updated_at(loaded_notes, memory_store):
    target = loaded_notes.notes[1]
    assert asyncio.run(loaded_notes.update_note(target.id, NoteUpdate(content="<i>edited</i>"))) is True

    updated = loaded_notes.note(target.id)
    assert updated.content == "<i>edited</i>"
    assert updated.title == target.title
    assert updated.updated_at > target.updated_at
    assert updated.created_at == target.created_at
    (_, _, changes, _, _), = memory_store.ops("update", "notes")
    assert set(changes) == {"content", "updated_at"}


def test_update_note_failure_keeps_prior(loaded_notes, memory_store, toasts):
    target = loaded_notes.notes[0]
    memory_store.fail.add("update")
    assert asyncio.run(loaded_notes.update_note(target.id, NoteUpdate(title="t2"))) is False
    assert loaded_notes.note(target.id) == target
    assert ("error", "Failed to update note") in toasts


def test_delete_note(loaded_notes, toasts):
    target = loaded_notes.notes[0]
    assert asyncio.run(loaded_notes.delete_note(target.id)) is True
    assert loaded_notes.note(target.id) is None
    assert ("success", "Note deleted successfully") in toasts


def test_get_notes_by_folder(loaded_notes, folders):
    assert [n.title for n in loaded_notes.get_notes_by_folder(folders["f1"])] == ["old"]


def test_folder_deletion_moves_notes(memory_store, signed_in, task_manager, note_manager):
    default = memory_store.seed("folders", ALICE.id, name="My Tasks")
    doomed = memory_store.seed("folders", ALICE.id, name="Scratch")
    memory_store.seed("tasks", ALICE.id, title="t", folder_id=default["id"])
    memory_store.seed("notes", ALICE.id, title="n", folder_id=doomed["id"])
    asyncio.run(task_manager.load())
    asyncio.run(note_manager.load())
    before = note_manager.notes[0]

    assert asyncio.run(task_manager.delete_folder(doomed["id"])) is True

    moved = note_manager.notes[0]
    assert moved.folder_id == default["id"]
    assert moved.updated_at > before.updated_at
    stored = memory_store.tables["notes"][0]
    assert stored["folder_id"] == default["id"]
    assert stored["updated_at"] > before.updated_at.isoformat()


def test_sign_out_clears_notes(loaded_notes, session):
    session.sign_out()
    assert loaded_notes.notes == ()
    assert loaded_notes.loading is True
