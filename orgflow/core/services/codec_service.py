from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from orgflow.config import settings
from orgflow.core.errors import MalformedGuid, MalformedHeader, UnterminatedNoteBlock
from orgflow.core.models.document import OrgDocument
from orgflow.core.models.note import Note
from orgflow.core.models.task import Task, TaskStatus
from orgflow.core.services.taxonomy_service import parse_tag
from orgflow.utils.logging import get_logger
from orgflow.utils.metadata import get_metadata_source

if TYPE_CHECKING:
    from orgflow.core.models.tag import Tag
    from orgflow.utils.metadata import MetadataSource


logger = get_logger(__name__)

CHECKBOX_PENDING = "[ ]"
CHECKBOX_DONE = "[x]"
NOTE_HEADER = "###"
SECTION_PREFIX = "## "
METADATA_MARKER = ">"
BODY_ESCAPE = "\\"


class _Section(Enum):
    BEFORE_TASKS = "before_tasks"
    TASKS = "tasks"
    BETWEEN = "between"
    NOTES = "notes"
    AFTER_NOTES = "after_notes"


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def parse_task_line(line: str) -> Task:
    """Parse one task line.

    Grammar: checkbox, optional `(P)` priority, optional ISO date, then the
    description with its tag tokens. Lines without a checkbox are accepted:
    a lone leading `x` (todo.txt style) marks the task done, anything else is
    read as a pending task. Never fails; a line with nothing but metadata
    yields an empty description.
    """
    text = line.strip()
    status = TaskStatus.PENDING
    if text.startswith(CHECKBOX_PENDING):
        text = text[len(CHECKBOX_PENDING):]
    elif text[:3].lower() == CHECKBOX_DONE:
        status = TaskStatus.DONE
        text = text[3:]
    elif text == "x" or text.startswith("x "):
        status = TaskStatus.DONE
        text = text[1:]

    # Priority, date and inline tags are lifted out of the text by the model
    return Task(description=text, status=status)


def format_task_line(task: Task) -> str:
    """Render a task in canonical order: checkbox, priority, date, description, tags."""
    parts = [CHECKBOX_DONE if task.is_done else CHECKBOX_PENDING]
    if task.priority:
        parts.append(f"({task.priority})")
    if task.date:
        parts.append(task.date.isoformat())
    if task.description:
        parts.append(task.description)
    parts.extend(str(tag) for tag in task.tags)
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


def _is_note_header(line: str) -> bool:
    return line == NOTE_HEADER or line.startswith(NOTE_HEADER + " ")


def _escape_body_line(line: str) -> str:
    if line.startswith(("#", BODY_ESCAPE)):
        return BODY_ESCAPE + line
    return line


def _unescape_body_line(line: str) -> str:
    if line.startswith(BODY_ESCAPE):
        return line[len(BODY_ESCAPE):]
    return line


def _parse_timestamp(value: str, *, key: str, line_number: int) -> dt.datetime | None:
    """Accept ISO datetimes and legacy date-only values (midnight UTC)."""
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError:
        logger.warning("line %d: unreadable %s timestamp %r, using default", line_number, key, value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed


def format_note_block(note: Note) -> list[str]:
    """Render a note as header, metadata line and escaped body lines.

    Metadata keys are written in the fixed order cre, mod, guid, followed by
    the tags. Absent values are left out rather than invented, so output
    stays deterministic; parsing fills them back in.
    """
    metadata = [METADATA_MARKER]
    if note.created_at is not None:
        metadata.append(f"cre:{note.created_at.isoformat()}")
    if note.updated_at is not None:
        metadata.append(f"mod:{note.updated_at.isoformat()}")
    if note.guid is not None:
        metadata.append(f"guid:{note.guid}")
    metadata.extend(str(tag) for tag in note.tags)

    lines = [f"{NOTE_HEADER} {note.title}", " ".join(metadata)]
    lines.extend(_escape_body_line(line) for line in note.content)
    return lines


class _DocumentParser:
    """Line-at-a-time parser tracking which section the cursor is in."""

    def __init__(self, source: MetadataSource) -> None:
        self._source = source
        self._section = _Section.BEFORE_TASKS
        self._block: list[tuple[int, str]] | None = None
        self.document = OrgDocument()

    def feed(self, line_number: int, raw_line: str) -> None:
        line = raw_line.rstrip()
        if not line.strip():
            return

        is_tasks_header = line == settings.tasks_header
        is_notes_header = line == settings.notes_header
        doc = self.document

        match self._section:
            case _Section.BEFORE_TASKS:
                if is_tasks_header:
                    self._section = _Section.TASKS
                elif is_notes_header:
                    self._section = _Section.NOTES
                else:
                    doc.preamble.append(line)

            case _Section.TASKS:
                if is_tasks_header:
                    raise MalformedHeader("duplicate tasks header", line_number=line_number)
                if is_notes_header:
                    self._section = _Section.NOTES
                elif line.startswith(SECTION_PREFIX):
                    doc.between.append(line)
                    self._section = _Section.BETWEEN
                else:
                    doc.push_task(parse_task_line(line))

            case _Section.BETWEEN:
                if is_tasks_header:
                    raise MalformedHeader("tasks header after the tasks section", line_number=line_number)
                if is_notes_header:
                    self._section = _Section.NOTES
                else:
                    doc.between.append(line)

            case _Section.NOTES:
                if is_tasks_header or is_notes_header:
                    raise MalformedHeader(f"unexpected {line!r} inside the notes section", line_number=line_number)
                if line.startswith(SECTION_PREFIX):
                    self._flush_note()
                    doc.trailer.append(line)
                    self._section = _Section.AFTER_NOTES
                elif _is_note_header(line):
                    self._flush_note()
                    self._block = [(line_number, line)]
                elif self._block is None:
                    doc.notes_preface.append(line)
                else:
                    self._block.append((line_number, line))

            case _Section.AFTER_NOTES:
                if is_tasks_header or is_notes_header:
                    raise MalformedHeader(f"unexpected {line!r} after the notes section", line_number=line_number)
                doc.trailer.append(line)

    def finish(self) -> OrgDocument:
        self._flush_note()
        return self.document

    def _flush_note(self) -> None:
        block, self._block = self._block, None
        if block is None:
            return

        header_number, header = block[0]
        if len(block) < 2 or not block[1][1].startswith(METADATA_MARKER):
            raise UnterminatedNoteBlock(
                f"note {header!r} has no metadata line", line_number=header_number
            )

        meta_number, meta_line = block[1]
        created_at: dt.datetime | None = None
        updated_at: dt.datetime | None = None
        guid: UUID | None = None
        tags: list[Tag] = []

        for token in meta_line[len(METADATA_MARKER):].split():
            key, sep, value = token.partition(":")
            key = key.lower()
            if sep and key == "cre":
                created_at = _parse_timestamp(value, key=key, line_number=meta_number)
            elif sep and key == "mod":
                updated_at = _parse_timestamp(value, key=key, line_number=meta_number)
            elif sep and key == "guid":
                try:
                    guid = UUID(value)
                except ValueError as err:
                    raise MalformedGuid(f"invalid guid {value!r}", line_number=meta_number) from err
                if guid in self.document.guids():
                    raise MalformedGuid(f"duplicate guid {guid}", line_number=meta_number)
            else:
                tag = parse_tag(token)
                if tag is None:
                    logger.warning("line %d: ignoring unknown metadata token %r", meta_number, token)
                else:
                    tags.append(tag)

        missing = [
            name for name, value in (("cre", created_at), ("mod", updated_at), ("guid", guid))
            if value is None
        ]
        if missing:
            logger.warning(
                "line %d: note %r is missing %s, using defaults",
                meta_number, header, ", ".join(missing),
            )

        note = Note(
            title=header[len(NOTE_HEADER):],
            content=[_unescape_body_line(line) for _, line in block[2:]],
            tags=tags,
            guid=guid,
            created_at=created_at,
            updated_at=updated_at,
        )
        self.document.push_note(note, metadata=self._source)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def parse(raw_text: str, *, metadata: MetadataSource | None = None) -> OrgDocument:
    """Parse document text into an OrgDocument.

    Missing note bodies, missing metadata keys and blank lines are tolerated;
    missing GUIDs and timestamps come from `metadata` (the system clock and
    uuid4 by default). Raises MalformedHeader, MalformedGuid or
    UnterminatedNoteBlock for text that cannot be read unambiguously.
    """
    parser = _DocumentParser(metadata or get_metadata_source())
    for line_number, line in enumerate(raw_text.splitlines(), start=1):
        parser.feed(line_number, line)
    document = parser.finish()

    logger.debug("Parsed document with %d tasks and %d notes", *document.len())
    return document


def serialize(document: OrgDocument) -> str:
    """Render a document as canonical text. Identical input gives identical output."""
    lines: list[str] = []
    if document.preamble:
        lines.extend(document.preamble)
        lines.append("")

    lines.append(settings.tasks_header)
    lines.extend(format_task_line(task) for task in document.tasks)
    lines.append("")

    if document.between:
        lines.extend(document.between)
        lines.append("")

    lines.append(settings.notes_header)
    lines.append("")
    if document.notes_preface:
        lines.extend(document.notes_preface)
        lines.append("")

    for note in document.notes:
        lines.extend(format_note_block(note))
        lines.append("")

    lines.extend(document.trailer)
    return "\n".join(lines).rstrip("\n") + "\n"
