"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(level: str | int = "WARNING") -> None:
    """Route ``plansmith`` loggers through a rich handler at *level*."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger("plansmith")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
