from __future__ import annotations

import logging
import sys

from orgflow.config import settings

PACKAGE_LOGGER = "orgflow"


def setup_logging() -> None:
    """Route orgflow log records to stdout for scripts and embedding apps.

    Library modules never call this; they only emit through `get_logger`.
    """
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.debug("orgflow logging set to %s", logging.getLevelName(level))


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
