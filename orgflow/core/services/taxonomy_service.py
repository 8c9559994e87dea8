from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING

from orgflow.core.models.tag import Tag, TagType
from orgflow.core.schemas.taxonomy import TagIndex
from orgflow.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from orgflow.core.models.document import OrgDocument


logger = get_logger(__name__)

# Sigil tags need a body starting with a word character: "@" or "+-" alone are prose.
_SIGIL_BODY = re.compile(r"^\w\S*$")
# key:value with a word-like key; values starting with "/" or ":" are URLs or clock times.
_CUSTOM_TOKEN = re.compile(r"^(?P<key>[A-Za-z][\w-]*):(?P<value>[^\s/:]\S*)$")


def classify(raw_token: str) -> TagType | None:
    """Return the tag variant of a single token, or None when it is not a tag.

    Dispatch is on the leading sigil: `@` context, `+` project, `p:` person,
    `!` one-off, any other `key:value` shape custom. The person check runs
    before the generic `key:value` check so `p:` never becomes a custom key.
    """
    token = raw_token.strip()
    if not token or any(ch.isspace() for ch in token):
        return None

    if token.startswith("@"):
        return TagType.context() if _SIGIL_BODY.match(token[1:]) else None
    if token.startswith("+"):
        return TagType.project() if _SIGIL_BODY.match(token[1:]) else None
    if token.startswith("!"):
        return TagType.oneoff() if _SIGIL_BODY.match(token[1:]) else None
    if token[:2].lower() == "p:":
        return TagType.person() if _SIGIL_BODY.match(token[2:]) else None

    match = _CUSTOM_TOKEN.match(token)
    if match:
        return TagType.custom(match.group("key"))
    return None


def parse_tag(raw_token: str) -> Tag | None:
    """Classify a token and build the normalized tag, or None for prose."""
    tag_type = classify(raw_token)
    if tag_type is None:
        return None
    token = raw_token.strip()
    return Tag(tag_type=tag_type, value=token[len(tag_type.prefix):])


def format_tag(tag: Tag) -> str:
    return str(tag)


def tag_prefix(tag_type: TagType) -> str:
    """Sigil that introduces tags of the given type (`@`, `+`, `p:`, `!`, `key:`)."""
    return tag_type.prefix


def merge_tags(*groups: Iterable[Tag]) -> list[Tag]:
    """Concatenate tag groups, keeping the first occurrence of each tag.

    Values are already case-folded by the Tag model, so plain equality is a
    case-insensitive comparison.
    """
    merged: list[Tag] = []
    seen: set[Tag] = set()
    for group in groups:
        for tag in group:
            if tag not in seen:
                seen.add(tag)
                merged.append(tag)
    return merged


def extract_tags(text: str, *, reserved_keys: Collection[str] = ()) -> tuple[list[Tag], str]:
    """Split free text into its tags and the remaining display text.

    Tokens are whitespace delimited. Tag tokens are removed and collected
    (deduplicated, in order of appearance); every other token, including
    unknown sigils such as `#random`, is kept verbatim. The remaining tokens
    are joined with single spaces so removal never leaves double spaces.

    Custom tags whose key is in `reserved_keys` are treated as prose and
    stay in the text.
    """
    tags: list[Tag] = []
    kept: list[str] = []
    for token in text.split():
        tag = parse_tag(token)
        if tag is None or tag.tag_type.key in reserved_keys:
            kept.append(token)
        else:
            tags.append(tag)
    return merge_tags(tags), " ".join(kept)


def collect_unique_tags(document: OrgDocument) -> TagIndex:
    """Count every tag used by the document's tasks and notes.

    Derived on demand; nothing is written back into the document.
    """
    counts: Counter[Tag] = Counter()
    for task in document.tasks:
        counts.update(task.tags)
    for note in document.notes:
        counts.update(note.tags)

    logger.debug(
        "Collected %d unique tags from %d tasks and %d notes",
        len(counts), len(document.tasks), len(document.notes),
    )
    return TagIndex(counts=dict(counts))


def index_from_counts(counts: dict[str, int]) -> TagIndex:
    """Build an index from written tags, e.g. `{"@work": 5, "@home": 2}`.

    Keys that are not tags are skipped; keys that normalize to the same tag
    have their counts added up.
    """
    merged: Counter[Tag] = Counter()
    for raw, n in counts.items():
        tag = parse_tag(raw)
        if tag is None:
            logger.debug("Skipping non-tag key %r while building tag index", raw)
            continue
        merged[tag] += n
    return TagIndex(counts=dict(merged))
