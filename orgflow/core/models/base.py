from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, field_validator, model_validator

from orgflow.utils.logging import get_logger

logger = get_logger(__name__)


class AppBaseModel(PydanticBaseModel):
    """Base model for all domain models."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )


class TimestampedModel(AppBaseModel):
    """Base model with creation and modification timestamps.

    Both stay None until the entity is pushed into a document, which fills
    them from its metadata source. Naive values are taken as UTC.
    """

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_timezone(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @model_validator(mode="after")
    def ensure_ordered_timestamps(self) -> TimestampedModel:
        """Keep modification time at or after creation time."""
        if self.created_at and self.updated_at and self.updated_at < self.created_at:
            logger.warning(
                "Modification time %s precedes creation time %s; using creation time",
                self.updated_at.isoformat(), self.created_at.isoformat(),
            )
            self.updated_at = self.created_at
        return self
