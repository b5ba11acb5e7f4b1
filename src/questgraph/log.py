"""
questgraph.log - Logging setup.

All modules log through ``logging.getLogger(__name__)``. Output goes to
stderr because stdout carries the stdio transport.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"


def resolve_level(level: str | int | None) -> int:
    """Turn a level name or number into a logging level, INFO when unknown."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return logging.INFO


def configure_logging(level: str | int | None = None) -> None:
    """Send ``questgraph`` logs to stderr at ``level``.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        stream=sys.stderr,
        format=LOG_FORMAT,
        level=resolve_level(level),
        force=True,
    )


__all__ = ["LOG_FORMAT", "configure_logging", "resolve_level"]
