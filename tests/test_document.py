"""Tests for the in-memory document model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from pydantic import ValidationError

from orgflow.core.errors import DuplicateGuid
from orgflow.core.models.document import OrgDocument
from orgflow.core.models.note import Note
from orgflow.core.models.task import Task
from tests.conftest import FIXED_NOW, FixedMetadataSource, StuckMetadataSource


class TestPushTask:
    def test_appends_in_order(self):
        doc = OrgDocument()
        doc.push_task(Task(description="first"))
        doc.push_task(Task(description="second"))
        assert doc.len() == (2, 0)
        assert doc.find_task(0).description == "first"
        assert doc.find_task(1).description == "second"

    def test_equal_tasks_are_kept(self):
        doc = OrgDocument()
        doc.push_task(Task(description="same"))
        doc.push_task(Task(description="same"))
        assert doc.len() == (2, 0)


class TestPushNote:
    """Test OrgDocument.push_note()."""

    def test_fills_guid_and_timestamps(self, metadata):
        doc = OrgDocument()
        stored = doc.push_note(Note(title="Idea"), metadata=metadata)
        assert stored.guid == UUID(int=1)
        assert stored.created_at == FIXED_NOW
        assert stored.updated_at == FIXED_NOW
        assert doc.notes == [stored]

    def test_does_not_mutate_argument(self, metadata):
        note = Note(title="Idea")
        OrgDocument().push_note(note, metadata=metadata)
        assert note.guid is None
        assert note.created_at is None

    def test_keeps_explicit_metadata(self, metadata):
        created = datetime(2023, 1, 1, tzinfo=UTC)
        note = Note(title="Old", guid=UUID(int=99), created_at=created, updated_at=created)
        stored = OrgDocument().push_note(note, metadata=metadata)
        assert stored.guid == UUID(int=99)
        assert stored.created_at == created
        assert metadata.guid_calls == 0

    def test_only_creation_time_known(self, metadata):
        created = FIXED_NOW + timedelta(days=3)
        stored = OrgDocument().push_note(Note(title="t", created_at=created), metadata=metadata)
        assert stored.updated_at == created

    def test_naive_clock_is_treated_as_utc(self):
        source = FixedMetadataSource(now=datetime(2024, 1, 1, 9, 0))
        stored = OrgDocument().push_note(Note(title="t"), metadata=source)
        assert stored.created_at == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def test_generated_guids_are_unique(self):
        source = FixedMetadataSource(guids=[UUID(int=5), UUID(int=5), UUID(int=6)])
        doc = OrgDocument()
        a = doc.push_note(Note(title="a"), metadata=source)
        b = doc.push_note(Note(title="b"), metadata=source)
        assert (a.guid, b.guid) == (UUID(int=5), UUID(int=6))

    def test_colliding_source_still_yields_unique_guids(self):
        source = StuckMetadataSource()
        doc = OrgDocument()
        first = doc.push_note(Note(title="a"), metadata=source)
        second = doc.push_note(Note(title="b"), metadata=source)
        assert first.guid == UUID(int=42)
        assert second.guid != first.guid
        assert len(doc.guids()) == 2

    def test_generated_guid_avoids_explicit_ones(self, metadata):
        doc = OrgDocument()
        doc.push_note(Note(title="explicit", guid=UUID(int=1)), metadata=metadata)
        generated = doc.push_note(Note(title="generated"), metadata=metadata)
        assert generated.guid == UUID(int=2)

    def test_duplicate_explicit_guid_raises(self, metadata):
        doc = OrgDocument()
        doc.push_note(Note(title="a", guid=UUID(int=3)), metadata=metadata)
        with pytest.raises(DuplicateGuid):
            doc.push_note(Note(title="b", guid=UUID(int=3)), metadata=metadata)
        assert doc.len() == (0, 1)

    def test_default_source(self):
        stored = OrgDocument().push_note(Note(title="t"))
        assert stored.guid is not None
        assert stored.created_at.tzinfo is not None
        assert stored.updated_at >= stored.created_at

    def test_direct_construction_rejects_repeated_guids(self):
        shared = UUID(int=1)
        with pytest.raises(ValidationError, match="more than once"):
            OrgDocument(notes=[Note(title="a", guid=shared), Note(title="b", guid=shared)])

    def test_direct_construction_with_distinct_guids(self):
        doc = OrgDocument(notes=[Note(title="a", guid=UUID(int=1)), Note(title="b", guid=UUID(int=2))])
        assert doc.guids() == {UUID(int=1), UUID(int=2)}


class TestLookups:
    def test_empty_document(self):
        doc = OrgDocument()
        assert doc.len() == (0, 0)
        assert doc.find_task(0) is None
        assert doc.find_note(UUID(int=1)) is None

    def test_find_note_by_uuid_or_string(self, built_document):
        standup = built_document.notes[0]
        assert built_document.find_note(standup.guid) is standup
        assert built_document.find_note(str(standup.guid)) is standup
        assert built_document.find_note(str(standup.guid).upper()) is standup

    def test_find_note_missing_or_malformed(self, built_document):
        assert built_document.find_note(UUID(int=999)) is None
        assert built_document.find_note("not-a-guid") is None
        assert built_document.find_note("") is None

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_find_task_out_of_range(self, built_document, index):
        assert built_document.find_task(index) is None

    def test_find_task_in_range(self, built_document):
        assert built_document.find_task(2).description == "Regular task without project tags"

    def test_len_counts_both(self, built_document):
        assert built_document.len() == (3, 2)
