from __future__ import annotations


class OrgflowError(Exception):
    """Base class for errors raised by orgflow."""


class ParseError(OrgflowError, ValueError):
    """Raised when document text cannot be turned into an OrgDocument.

    `line_number` is 1-based and points at the offending line, or is None
    when the problem is not tied to a single line.
    """

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class MalformedHeader(ParseError):
    """A section header appears twice or out of order."""


class MalformedGuid(ParseError):
    """A `guid:` field is not a well-formed UUID or repeats an earlier one."""


class UnterminatedNoteBlock(ParseError):
    """A note header is not followed by its metadata line."""


class DuplicateGuid(OrgflowError, ValueError):
    """A note pushed into a document reuses a GUID already present."""
