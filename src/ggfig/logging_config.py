"""
Logging configuration for the ``ggfig`` logger namespace.

Library modules only create module loggers (``logging.getLogger(__name__)``); handlers
are attached here, by the CLI or by an embedding application.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

__all__ = [
    "setup_logging",
]

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%H:%M:%S"


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure the ``ggfig`` logger.

    Args:
        level (int | str): Logging level, e.g. ``logging.DEBUG`` or ``"INFO"``.
        log_file (str | None): Optional path that also receives every record.
        stream (TextIO | None): Console stream; stderr by default so command output on
            stdout stays clean.

    Returns:
        logging.Logger: The configured ``ggfig`` logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = logging.getLogger("ggfig")
    logger.setLevel(level)

    # Reconfiguring replaces handlers instead of stacking duplicates.
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("logging initialized at %s", logging.getLevelName(level))
    return logger
