from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import ConfigDict, Field, field_validator

from orgflow.config import settings
from orgflow.core.services.taxonomy_service import merge_tags

from .base import TimestampedModel
from .tag import Tag, TagKind

# Keys owned by the note metadata line; custom tags cannot reuse them.
RESERVED_METADATA_KEYS = frozenset({"cre", "mod", "guid"})


class Note(TimestampedModel):
    """Note domain model."""

    # Edits after construction go through the same normalization
    model_config = ConfigDict(validate_assignment=True)

    guid: UUID | None = Field(default=None, description="Globally unique note identifier")

    title: str = Field(default="", validate_default=True, description="Note title")
    content: list[str] = Field(default_factory=list, description="Body lines")

    tags: list[Tag] = Field(default_factory=list, description="Tags for categorization")

    @field_validator("title")
    @classmethod
    def normalize_title(cls, v: str) -> str:
        """Collapse whitespace; an empty title becomes the untitled placeholder."""
        collapsed = " ".join(v.split())
        return collapsed or settings.untitled_note_title

    @field_validator("content")
    @classmethod
    def normalize_content(cls, v: list[str]) -> list[str]:
        """Split embedded newlines, strip trailing whitespace, drop blank lines."""
        lines: list[str] = []
        for chunk in v:
            for line in chunk.splitlines():
                line = line.rstrip()
                if line.strip():
                    lines.append(line)
        return lines

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[Tag]) -> list[Tag]:
        for tag in v:
            if tag.tag_type.kind is TagKind.CUSTOM and tag.tag_type.key in RESERVED_METADATA_KEYS:
                raise ValueError(f"Tag key {tag.tag_type.key!r} is reserved for note metadata")
        return merge_tags(v)
