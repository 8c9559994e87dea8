from __future__ import annotations

from datetime import UTC, datetime
from functools import lru_cache
from typing import Protocol
from uuid import UUID, uuid4

from orgflow.config import settings
from orgflow.utils.logging import get_logger

logger = get_logger(__name__)


class MetadataSource(Protocol):
    """Clock and identifier capability used to fill in note metadata."""

    def now(self) -> datetime: ...

    def new_guid(self) -> UUID: ...


class SystemMetadataSource:
    """Wall clock in UTC and random version 4 GUIDs.

    When `ORGFLOW_DEFAULT_TIMESTAMP` is configured, that value is returned
    instead of the current time.
    """

    def now(self) -> datetime:
        if settings.default_timestamp is not None:
            pinned = settings.default_timestamp
            return pinned if pinned.tzinfo else pinned.replace(tzinfo=UTC)
        return datetime.now(UTC)

    def new_guid(self) -> UUID:
        return uuid4()


@lru_cache(maxsize=1)
def get_metadata_source() -> SystemMetadataSource:
    """Return the process-wide default metadata source."""
    logger.debug("Initializing system metadata source")
    return SystemMetadataSource()


_MAX_GUID_ATTEMPTS = 8


def new_unique_guid(source: MetadataSource, taken: set[UUID]) -> UUID:
    """Draw GUIDs from `source` until one is not in `taken`.

    A source that keeps colliding (e.g. a fixed test double) is abandoned
    after a few attempts in favour of uuid4.
    """
    for _ in range(_MAX_GUID_ATTEMPTS):
        guid = source.new_guid()
        if guid not in taken:
            return guid
        logger.debug("Generated guid %s collides; drawing again", guid)

    logger.warning("Metadata source kept producing used guids; falling back to uuid4")
    guid = uuid4()
    while guid in taken:
        guid = uuid4()
    return guid
