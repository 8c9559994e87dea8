from __future__ import annotations

from typing import TYPE_CHECKING

from orgflow.core.models.note import RESERVED_METADATA_KEYS, Note
from orgflow.core.services.codec_service import parse_task_line
from orgflow.core.services.taxonomy_service import extract_tags, merge_tags
from orgflow.utils.logging import get_logger

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import Sequence

    from orgflow.core.models.task import Task

logger = get_logger(__name__)


def compose_task(text: str, *, today: dt.date | None = None) -> Task:
    """Build a task from an editor input line such as `Fix login +webdev @work`.

    The line follows the task grammar, checkbox optional. When it carries no
    date and `today` is given, the task is dated `today`.
    """
    task = parse_task_line(text)
    if task.date is None and today is not None:
        task.date = today
    return task


def compose_note(title: str | None, lines: Sequence[str]) -> Note | None:
    """Build a note from a draft title and body, moving inline tags to the tag list.

    Tags are collected from the title first, then from each body line, and
    removed from the text. Words shaped like `cre:`, `mod:` or `guid:` tags
    stay in the text since those keys belong to the metadata line. Lines
    left empty are dropped. Returns None when neither title nor body has any
    text, mirroring the editor discarding an empty draft.
    """
    raw_title = (title or "").strip()
    has_title = bool(raw_title)
    has_content = any(line.strip() for line in lines)
    if not (has_title or has_content):
        logger.debug("Discarding empty note draft")
        return None

    title_tags, clean_title = extract_tags(raw_title, reserved_keys=RESERVED_METADATA_KEYS)

    content_tags = []
    clean_content: list[str] = []
    for line in lines:
        line_tags, clean_line = extract_tags(line, reserved_keys=RESERVED_METADATA_KEYS)
        content_tags.extend(line_tags)
        if clean_line:
            clean_content.append(clean_line)

    # Empty titles fall back to the untitled placeholder inside the model
    return Note(
        title=clean_title,
        content=clean_content,
        tags=merge_tags(title_tags, content_tags),
    )
