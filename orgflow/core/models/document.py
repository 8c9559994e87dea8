from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import Field, model_validator

from orgflow.core.errors import DuplicateGuid
from orgflow.utils.logging import get_logger
from orgflow.utils.metadata import get_metadata_source, new_unique_guid

from .base import AppBaseModel
from .note import Note
from .task import Task

if TYPE_CHECKING:
    from orgflow.utils.metadata import MetadataSource

logger = get_logger(__name__)


class OrgDocument(AppBaseModel):
    """A knowledge base document: ordered tasks and ordered notes.

    Lines outside the two sections are kept verbatim so that rewriting a
    document does not drop text written by other tools:

    - preamble: lines before the first section header
    - between: a foreign `## ...` section between tasks and notes
    - notes_preface: lines after the notes header, before the first note
    - trailer: a foreign `## ...` section after the notes
    """

    preamble: list[str] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    between: list[str] = Field(default_factory=list)
    notes_preface: list[str] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    trailer: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_guids(self) -> OrgDocument:
        seen: set[UUID] = set()
        for note in self.notes:
            if note.guid is None:
                continue
            if note.guid in seen:
                raise DuplicateGuid(f"Note guid {note.guid} is used more than once in this document")
            seen.add(note.guid)
        return self

    def push_task(self, task: Task) -> Task:
        """Append a task."""
        self.tasks.append(task)
        return task

    def push_note(self, note: Note, *, metadata: MetadataSource | None = None) -> Note:
        """Append a note, filling in a missing GUID and timestamps.

        A generated GUID is guaranteed distinct from every GUID already in
        the document. An explicit GUID that is already in use raises
        DuplicateGuid. Returns the stored note; the argument is not mutated.
        """
        source = metadata or get_metadata_source()
        existing = self.guids()

        guid = note.guid
        if guid is None:
            guid = new_unique_guid(source, existing)
        elif guid in existing:
            raise DuplicateGuid(f"Note guid {guid} is already used in this document")

        created_at = note.created_at
        updated_at = note.updated_at
        if created_at is None or updated_at is None:
            now = source.now()
            if now.tzinfo is None:
                now = now.replace(tzinfo=UTC)
            if created_at is None:
                created_at = min(now, updated_at) if updated_at else now
            if updated_at is None:
                updated_at = max(now, created_at)

        stored = note.model_copy(
            update={"guid": guid, "created_at": created_at, "updated_at": updated_at},
            deep=True,
        )
        self.notes.append(stored)
        logger.debug("Pushed note %s (%r)", guid, stored.title)
        return stored

    def len(self) -> tuple[int, int]:
        """Return (task_count, note_count)."""
        return len(self.tasks), len(self.notes)

    def find_note(self, guid: UUID | str) -> Note | None:
        """Return the note with this GUID, or None if missing or malformed."""
        try:
            note_uuid = UUID(str(guid))
        except ValueError:
            return None
        for note in self.notes:
            if note.guid == note_uuid:
                return note
        return None

    def find_task(self, index: int) -> Task | None:
        """Return the task at this position, or None when out of range."""
        if 0 <= index < len(self.tasks):
            return self.tasks[index]
        return None

    def guids(self) -> set[UUID]:
        return {note.guid for note in self.notes if note.guid is not None}
