from __future__ import annotations

from pydantic import Field

from orgflow.core.models.base import AppBaseModel
from orgflow.core.models.tag import Tag, TagType  # noqa: TCH001


class TagIndex(AppBaseModel):
    """Aggregated tag usage across a document.

    - counts: number of entities carrying each normalized tag

    Derived on demand and never persisted.
    """

    counts: dict[Tag, int] = Field(default_factory=dict)

    def count(self, tag: Tag) -> int:
        return self.counts.get(tag, 0)

    def of_type(self, tag_type: TagType) -> dict[str, int]:
        """Usage counts of one tag variant, keyed by bare value."""
        return {tag.value: n for tag, n in self.counts.items() if tag.tag_type == tag_type}

    @property
    def vocab(self) -> list[str]:
        """Unique tags in their written form, sorted."""
        return sorted(str(tag) for tag in self.counts)

    def __len__(self) -> int:
        return len(self.counts)
