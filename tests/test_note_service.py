"""Tests for composing tasks and notes from editor drafts."""

from __future__ import annotations

from datetime import date

from orgflow.core.models.task import TaskStatus
from orgflow.core.services.note_service import compose_note, compose_task
from orgflow.core.services.taxonomy_service import parse_tag


def test_compose_task_from_plain_input():
    task = compose_task("Fix login +webdev @work")
    assert task.status is TaskStatus.PENDING
    assert task.description == "Fix login"
    assert task.tags == [parse_tag("+webdev"), parse_tag("@work")]
    assert task.date is None


def test_compose_task_dates_undated_input():
    assert compose_task("Water plants", today=date(2024, 6, 1)).date == date(2024, 6, 1)


def test_compose_task_keeps_explicit_date():
    task = compose_task("[ ] (B) 2024-01-01 Renew passport", today=date(2024, 6, 1))
    assert task.date == date(2024, 1, 1)
    assert task.priority == "B"


def test_compose_note_moves_tags_out_of_text():
    note = compose_note("Meeting @work", ["Discussed +q1 roadmap", "@home", "", "follow up"])
    assert note.title == "Meeting"
    assert note.content == ["Discussed roadmap", "follow up"]
    assert note.tags == [parse_tag("@work"), parse_tag("+q1"), parse_tag("@home")]
    assert note.guid is None


def test_compose_note_untitled():
    note = compose_note("", ["just a body"])
    assert note.title == "Untitled Note"
    assert note.content == ["just a body"]


def test_compose_note_empty_draft_is_discarded():
    assert compose_note("", []) is None
    assert compose_note(None, ["   ", ""]) is None


def test_compose_note_deduplicates_tags():
    note = compose_note("Plan @Work", ["more @work"])
    assert note.tags == [parse_tag("@work")]


def test_compose_note_keeps_metadata_shaped_words_as_text():
    note = compose_note("Release", ["mod:approved by lead"])
    assert note.content == ["mod:approved by lead"]
    assert note.tags == []


def test_compose_note_metadata_shaped_title_word():
    note = compose_note("cre:draft plan @work", ["guid:abc is not a tag"])
    assert note.title == "cre:draft plan"
    assert note.content == ["guid:abc is not a tag"]
    assert note.tags == [parse_tag("@work")]
