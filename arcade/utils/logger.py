"""Logging utilities for the puzzle core.

The default level comes from ``ARCADE_LOG_LEVEL`` when set, so generator
restarts and rejected moves can be traced without touching calling code.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

LOG_LEVEL_ENV = "ARCADE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

Level = Union[int, str]


def resolve_level(level: Optional[Level] = None) -> int:
    """Turn a level name or number into a logging level.

    ``None`` falls back to ``$ARCADE_LOG_LEVEL`` and then INFO. Unknown names
    raise ``ValueError``.
    """

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    if level.strip().isdigit():
        return int(level)
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(level: Optional[Level] = None) -> None:
    """Install a single stream handler on the root logger."""

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger, configuring defaults if needed."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or "arcade")
