from .core.errors import (
    DuplicateGuid,
    MalformedGuid,
    MalformedHeader,
    OrgflowError,
    ParseError,
    UnterminatedNoteBlock,
)
from .core.models.document import OrgDocument
from .core.models.note import Note
from .core.models.tag import Tag, TagKind, TagType
from .core.models.task import Task, TaskStatus
from .core.schemas.completion import Idle, TagToken, TokenSpan, Typing
from .core.schemas.taxonomy import TagIndex
from .core.services.autocompletion_service import AutocompletionEngine, accept, detect_tag_token, suggest
from .core.services.codec_service import parse, serialize
from .core.services.note_service import compose_note, compose_task
from .core.services.taxonomy_service import classify, collect_unique_tags, extract_tags, parse_tag

__version__ = "0.1.0"

__all__ = [
    "AutocompletionEngine",
    "DuplicateGuid",
    "Idle",
    "MalformedGuid",
    "MalformedHeader",
    "Note",
    "OrgDocument",
    "OrgflowError",
    "ParseError",
    "Tag",
    "TagIndex",
    "TagKind",
    "TagToken",
    "TagType",
    "Task",
    "TaskStatus",
    "TokenSpan",
    "Typing",
    "UnterminatedNoteBlock",
    "accept",
    "classify",
    "collect_unique_tags",
    "compose_note",
    "compose_task",
    "detect_tag_token",
    "extract_tags",
    "parse",
    "parse_tag",
    "serialize",
    "suggest",
]
