from __future__ import annotations

import re
from enum import Enum
from typing import assert_never

from pydantic import ConfigDict, Field, field_validator, model_validator

from .base import AppBaseModel

CUSTOM_KEY_PATTERN = re.compile(r"^[A-Za-z][\w-]*$")
_WORD_START = re.compile(r"^\w")


class TagKind(str, Enum):
    """Syntactic family of a tag token."""

    CONTEXT = "context"  # @place
    PROJECT = "project"  # +project
    PERSON = "person"  # p:name
    CUSTOM = "custom"  # key:value
    ONEOFF = "oneoff"  # !marker


class TagType(AppBaseModel):
    """Tag variant: a kind, plus the key for custom `key:value` tags."""

    model_config = ConfigDict(frozen=True)

    kind: TagKind
    key: str | None = None

    @field_validator("key", mode="before")
    @classmethod
    def normalize_key(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def validate_key(self) -> TagType:
        if self.kind is TagKind.CUSTOM:
            if not self.key or not CUSTOM_KEY_PATTERN.match(self.key):
                raise ValueError(f"Custom tags need a key matching {CUSTOM_KEY_PATTERN.pattern}")
            if self.key == "p":
                raise ValueError("Key 'p' is reserved for person tags")
        elif self.key is not None:
            raise ValueError(f"Only custom tags carry a key, got {self.kind.value} with key {self.key!r}")
        return self

    @classmethod
    def context(cls) -> TagType:
        return cls(kind=TagKind.CONTEXT)

    @classmethod
    def project(cls) -> TagType:
        return cls(kind=TagKind.PROJECT)

    @classmethod
    def person(cls) -> TagType:
        return cls(kind=TagKind.PERSON)

    @classmethod
    def oneoff(cls) -> TagType:
        return cls(kind=TagKind.ONEOFF)

    @classmethod
    def custom(cls, key: str) -> TagType:
        return cls(kind=TagKind.CUSTOM, key=key)

    @property
    def prefix(self) -> str:
        """Sigil written in front of the tag value."""
        match self.kind:
            case TagKind.CONTEXT:
                return "@"
            case TagKind.PROJECT:
                return "+"
            case TagKind.PERSON:
                return "p:"
            case TagKind.ONEOFF:
                return "!"
            case TagKind.CUSTOM:
                return f"{self.key}:"
            case _ as unreachable:
                assert_never(unreachable)

    @property
    def label(self) -> str:
        """Human readable name, e.g. for a suggestion popup title."""
        match self.kind:
            case TagKind.CONTEXT:
                return "Context"
            case TagKind.PROJECT:
                return "Project"
            case TagKind.PERSON:
                return "Person"
            case TagKind.ONEOFF:
                return "OneOff"
            case TagKind.CUSTOM:
                return f"Custom({self.key})"
            case _ as unreachable:
                assert_never(unreachable)


class Tag(AppBaseModel):
    """A normalized tag. Identity is its type plus its case-folded value."""

    model_config = ConfigDict(frozen=True)

    tag_type: TagType = Field(description="Variant of the tag")
    value: str = Field(min_length=1, description="Case-folded tag value without sigil")

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        if any(ch.isspace() for ch in v):
            raise ValueError("Tag values cannot contain whitespace")
        return v

    @model_validator(mode="after")
    def validate_shape(self) -> Tag:
        """Reject values that would not read back as the same tag once written."""
        if self.tag_type.kind is TagKind.CUSTOM:
            if self.value[0] in "/:":
                raise ValueError(f"Custom tag values cannot start with {self.value[0]!r}")
        elif not _WORD_START.match(self.value):
            raise ValueError(f"{self.tag_type.label} tag values must start with a word character")
        return self

    def __str__(self) -> str:
        return f"{self.tag_type.prefix}{self.value}"
