from __future__ import annotations

import datetime as dt
import re
from enum import Enum

from pydantic import Field, field_validator, model_validator

from orgflow.core.services.taxonomy_service import extract_tags, merge_tags

from .base import AppBaseModel
from .tag import Tag  # noqa: TCH001

PRIORITY_TOKEN = re.compile(r"^\(([A-Z])\)$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_token(token: str) -> dt.date | None:
    """Return the date written as `YYYY-MM-DD`, or None for anything else."""
    if not _ISO_DATE.match(token):
        return None
    try:
        return dt.date.fromisoformat(token)
    except ValueError:
        return None


class TaskStatus(str, Enum):
    """Completion state of a task."""

    PENDING = "pending"
    DONE = "done"


class Task(AppBaseModel):
    """Task domain model. Identity is its position in the document."""

    description: str = Field(default="", description="Free-text description without tags")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Completion state")
    priority: str | None = Field(default=None, pattern=r"^[A-Z]$", description="Priority letter A-Z")
    date: dt.date | None = Field(default=None, description="Optional task date")
    tags: list[Tag] = Field(default_factory=list, description="Tags for categorization")

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: object) -> object:
        if isinstance(v, str):
            stripped = v.strip().strip("()").upper()
            return stripped or None
        return v

    @model_validator(mode="after")
    def normalize_description_and_tags(self) -> Task:
        """Move inline tags and leading task metadata out of the description.

        A leading `(X)` word fills a missing priority and a following ISO
        date fills a missing date, in the same slots a task line reads them
        from. Keeps a task built in memory identical to the same task read
        back from its serialized line.
        """
        inline_tags, cleaned = extract_tags(self.description)
        words = cleaned.split()

        # Priority is only read from the first slot, ahead of any date
        if self.priority is None and self.date is None and words:
            match = PRIORITY_TOKEN.match(words[0])
            if match:
                self.priority = match.group(1)
                words = words[1:]
        if self.date is None and words:
            date = parse_date_token(words[0])
            if date is not None:
                self.date = date
                words = words[1:]

        self.description = " ".join(words)
        self.tags = merge_tags(self.tags, inline_tags)
        return self

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE
