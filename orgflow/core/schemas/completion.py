from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field, model_validator

from orgflow.core.models.base import AppBaseModel
from orgflow.core.models.tag import TagType  # noqa: TCH001


class TokenSpan(AppBaseModel):
    """Half-open character range [start, end) of a token in the input."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def validate_order(self) -> TokenSpan:
        if self.end < self.start:
            raise ValueError("Token span end must not precede its start")
        return self


class TagToken(AppBaseModel):
    """An in-progress tag token found around the cursor."""

    model_config = ConfigDict(frozen=True)

    span: TokenSpan
    partial: str = Field(description="Token text from its start up to the cursor")
    tag_type: TagType


class Idle(AppBaseModel):
    """No tag is being typed."""

    model_config = ConfigDict(frozen=True)

    state: Literal["idle"] = "idle"


class Typing(AppBaseModel):
    """The cursor sits inside a tag token of `token.tag_type`."""

    model_config = ConfigDict(frozen=True)

    state: Literal["typing"] = "typing"
    token: TagToken

    @property
    def tag_type(self) -> TagType:
        return self.token.tag_type


CompletionState = Idle | Typing
