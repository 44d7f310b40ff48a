# tests/test_models.py
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from fastodo.models.entities import Task
from fastodo.models.rows import (
    parse_due_date, parse_timestamp, row_to_folder, row_to_note, row_to_task, to_row_values,
)
from fastodo.models.updates import UNSET, NoteUpdate, TaskUpdate
from fastodo.services.errors import InvariantViolation, require_text
from fastodo.utils.markup import plain_text, sanitize_markup


# --- Partial updates -------------------------------------------------------

def test_unset_fields_are_absent():
    upd = TaskUpdate(title="t", due_date=None)
    assert upd.changes() == {"title": "t", "due_date": None}
    assert upd.is_set("due_date") and not upd.is_set("priority")
    assert TaskUpdate().is_empty()
    assert not UNSET


def test_apply_to_replaces_only_present_fields():
    task = Task(id="1", title="a", folder_id="f", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
                due_date=date(2024, 2, 1), priority="low")
    updated = TaskUpdate(priority="high", due_date=None).apply_to(task)
    assert (updated.title, updated.priority, updated.due_date) == ("a", "high", None)
    assert task.priority == "low"
    assert NoteUpdate(content="x").changes() == {"content": "x"}


# --- Rows ------------------------------------------------------------------

def test_parse_timestamp_variants():
    utc = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2024-05-01T12:00:00Z") == utc
    assert parse_timestamp("2024-05-01 12:00:00") == utc
    assert parse_timestamp("2024-05-01T12:00:00+00:00") == utc


def test_parse_due_date_variants():
    assert parse_due_date(None) is None
    assert parse_due_date("") is None
    assert parse_due_date("2024-05-01") == date(2024, 5, 1)
    assert parse_due_date("2024-05-01T00:00:00.000Z") == date(2024, 5, 1)


def test_row_to_task_defaults():
    task = row_to_task({
        "id": 7, "title": "t", "folder_id": "f", "created_at": "2024-01-01T00:00:00Z",
        "completed": 1, "priority": "bogus", "description": None,
    })
    assert task.id == "7"
    assert task.completed is True
    assert task.priority == "medium"
    assert task.description == ""
    assert task.due_date is None


def test_row_to_note_and_folder():
    note = row_to_note({"id": "n", "title": "t", "folder_id": "f", "content": None,
                        "created_at": "2024-01-01T00:00:00Z", "updated_at": "2024-01-02T00:00:00Z"})
    assert note.content == ""
    assert note.updated_at > note.created_at
    assert row_to_folder({"id": "f", "name": "Work", "color": ""}).color is None


def test_to_row_values_formats_dates():
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    out = to_row_values({"due_date": date(2024, 3, 4), "updated_at": stamp, "title": "t"})
    assert out == {"due_date": "2024-03-04", "updated_at": "2024-01-01T00:00:00+00:00", "title": "t"}


# --- Errors ----------------------------------------------------------------

@pytest.mark.parametrize("value", ["", "   ", None])
def test_require_text_rejects_blank(value):
    with pytest.raises(InvariantViolation, match="name required"):
        require_text(value, "name")


def test_invariant_violation_is_value_error():
    assert issubclass(InvariantViolation, ValueError)


# --- Markup ----------------------------------------------------------------

def test_sanitize_keeps_formatting_and_safe_links():
    raw = ('<p onclick="x">hi <a href="javascript:alert(1)">x</a> '
           '<a href="https://example.com">y</a></p>')
    assert sanitize_markup(raw) == '<p>hi <a>x</a> <a href="https://example.com">y</a></p>'


def test_sanitize_drops_scripts_and_unwraps_unknown_tags():
    assert sanitize_markup("<font>t</font><script>alert(1)</script><b>ok</b>") == "t<b>ok</b>"
    assert sanitize_markup("<b>bold") == "<b>bold</b>"
    assert sanitize_markup("a &lt; b") == "a &lt; b"
    assert sanitize_markup(None) == ""


def test_plain_text_collapses_blocks():
    assert plain_text("<p>a</p><p>b <b>c</b></p>") == "a b c"
    assert plain_text("<style>p{}</style>x") == "x"
    assert plain_text("") == ""
