from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from orgflow.config import settings
from orgflow.core.models.tag import Tag
from orgflow.core.schemas.completion import CompletionState, Idle, TagToken, TokenSpan, Typing
from orgflow.core.services.taxonomy_service import classify
from orgflow.utils.logging import get_logger

if TYPE_CHECKING:
    from orgflow.core.models.tag import TagType
    from orgflow.core.schemas.taxonomy import TagIndex


logger = get_logger(__name__)

SEPARATOR = " "
# Stand-in body used to test whether a partial token is the start of a tag.
_PROBE = "a"


def _token_bounds(text: str, cursor: int) -> tuple[int, int]:
    start = cursor
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    end = cursor
    while end < len(text) and not text[end].isspace():
        end += 1
    return start, end


def detect_tag_token(text: str, cursor: int | None = None) -> TagToken | None:
    """Find the tag being typed around `cursor` (end of text by default).

    The token text up to the cursor counts as an in-progress tag when
    `classify` accepts it as is, or once a body character is appended, so a
    bare `@`, `p:` or `due:` already opens a suggestion.
    """
    if cursor is None:
        cursor = len(text)
    cursor = max(0, min(cursor, len(text)))

    start, end = _token_bounds(text, cursor)
    partial = text[start:cursor]
    if not partial:
        return None

    tag_type = classify(partial) or classify(partial + _PROBE)
    if tag_type is None:
        return None
    return TagToken(span=TokenSpan(start=start, end=end), partial=partial, tag_type=tag_type)


def suggest(
    prefix: str,
    tag_type: TagType,
    tag_index: TagIndex,
    *,
    limit: int | None = None,
) -> list[str]:
    """Rank known tag values of `tag_type` that start with `prefix`.

    The type's sigil is stripped from `prefix` when present (`"@wo"` and
    `"wo"` are equivalent for context tags) and matching is case-insensitive.
    Results are bare values ordered by usage count, most used first, then
    alphabetically. No match gives an empty list.
    """
    sigil = tag_type.prefix
    needle = prefix.strip()
    if needle.lower().startswith(sigil):
        needle = needle[len(sigil):]
    needle = needle.lower()

    candidates = [
        (value, count)
        for value, count in tag_index.of_type(tag_type).items()
        if value.startswith(needle)
    ]
    candidates.sort(key=lambda item: (-item[1], item[0]))

    if limit is None:
        limit = settings.suggestion_limit
    ranked = [value for value, _ in candidates]
    return ranked[:limit] if limit is not None else ranked


def _is_tag_value(candidate: str, tag_type: TagType) -> bool:
    try:
        Tag(tag_type=tag_type, value=candidate)
    except ValidationError:
        return False
    return True


def accept(text: str, token_span: TokenSpan, selected_candidate: str) -> str:
    """Replace the partial token at `token_span` with the chosen tag.

    Candidates are bare values as returned by `suggest` and get the sigil
    of the token they replace, even when the value itself looks like a tag
    (a person value `p:x` is written `p:p:x`). Only a candidate that cannot
    be a value of that type but is already a full tag of it, such as
    `@work`, is inserted as is. A separator follows the tag unless the text
    after the span already starts with whitespace.
    """
    replacement = selected_candidate.strip()
    replaced = text[token_span.start:token_span.end]

    tag_type = classify(replaced) or classify(replaced + _PROBE)
    if tag_type is not None and (
        _is_tag_value(replacement, tag_type) or classify(replacement) != tag_type
    ):
        replacement = f"{tag_type.prefix}{replacement}"

    rest = text[token_span.end:]
    separator = "" if rest[:1].isspace() else SEPARATOR
    return f"{text[:token_span.start]}{replacement}{separator}{rest}"


class AutocompletionEngine:
    """Tracks whether a tag is being typed and offers ranked completions.

    Two states: Idle, and Typing(tag_type) while the cursor is inside a tag
    token. The engine never touches the document or the index it reads.
    """

    def __init__(self, tag_index: TagIndex, *, limit: int | None = None) -> None:
        self._index = tag_index
        self._limit = limit
        self._state: CompletionState = Idle()

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def tag_index(self) -> TagIndex:
        return self._index

    @tag_index.setter
    def tag_index(self, value: TagIndex) -> None:
        self._index = value

    def update(self, text: str, cursor: int | None = None) -> CompletionState:
        """Recompute the state after an edit or a cursor move."""
        token = detect_tag_token(text, cursor)
        self._state = Typing(token=token) if token is not None else Idle()
        return self._state

    def suggestions(self) -> list[str]:
        """Suggestions for the token being typed; empty while idle."""
        if not isinstance(self._state, Typing):
            return []
        token = self._state.token
        return suggest(token.partial, token.tag_type, self._index, limit=self._limit)

    def commit(self, text: str, candidate: str) -> str:
        """Insert `candidate` for the token being typed and go idle."""
        state, self._state = self._state, Idle()
        if not isinstance(state, Typing):
            logger.debug("Commit requested while idle; input left unchanged")
            return text
        return accept(text, state.token.span, candidate)

    def cancel(self) -> None:
        self._state = Idle()
