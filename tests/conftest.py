"""
Shared pytest fixtures for orgflow tests.

Provides a deterministic metadata source so GUIDs and timestamps in
parsed and pushed notes can be asserted exactly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import pytest

from orgflow.core.models.document import OrgDocument
from orgflow.core.models.note import Note
from orgflow.core.models.task import Task
from orgflow.core.services.taxonomy_service import parse_tag

FIXED_NOW = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)


class FixedMetadataSource:
    """
    Deterministic metadata source for testing.

    Always reports the same time; GUIDs come from `guids` in order, then
    from a counter (UUID(int=1), UUID(int=2), ...).
    """

    def __init__(self, now: datetime = FIXED_NOW, guids: list[UUID] | None = None):
        self._now = now
        self._guids = list(guids or [])
        self._counter = 0
        self.guid_calls = 0

    def now(self) -> datetime:
        return self._now

    def new_guid(self) -> UUID:
        self.guid_calls += 1
        if self._guids:
            return self._guids.pop(0)
        self._counter += 1
        return UUID(int=self._counter)


class StuckMetadataSource(FixedMetadataSource):
    """Returns the same GUID forever."""

    def new_guid(self) -> UUID:
        self.guid_calls += 1
        return UUID(int=42)


SAMPLE_DOCUMENT = "\n".join([
    "Personal knowledge base",
    "",
    "## Tasks",
    "[ ] (A) 2024-03-01 Call the dentist @phone p:alice",
    "[x] Buy milk +groceries",
    "[ ] Review draft due:2024-03-10 !urgent",
    "",
    "## Notes",
    "",
    "### Weekly review",
    "> cre:2024-03-01T09:00:00+00:00 mod:2024-03-02T10:30:00+00:00 "
    "guid:a1a2a3a4-b1b2-c1c2-d1d2-d3d4d5d6d7d8 @office +q1",
    "- Close open loops",
    "- Plan next week",
    "",
    "### Empty note",
    "> cre:2024-03-03T08:00:00+00:00 mod:2024-03-03T08:00:00+00:00 "
    "guid:11111111-2222-3333-4444-555555555555",
]) + "\n"


@pytest.fixture
def metadata() -> FixedMetadataSource:
    return FixedMetadataSource()


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_DOCUMENT


@pytest.fixture
def built_document(metadata: FixedMetadataSource) -> OrgDocument:
    """A document assembled only through push operations."""
    doc = OrgDocument()
    doc.push_task(Task(description="Fix login bug +webdev @work", priority="A"))
    doc.push_task(Task(description="Update docs +website +docs", status="done"))
    doc.push_task(Task(description="Regular task without project tags"))
    doc.push_note(
        Note(
            title="Standup",
            content=["Talked about the release", "## literally a heading", "\\ starts with a backslash"],
            tags=[parse_tag("@work"), parse_tag("p:bob")],
        ),
        metadata=metadata,
    )
    doc.push_note(Note(title="Scratch"), metadata=metadata)
    return doc
