"""Logging configuration for the ledgercoder command line.

Library modules only call ``logging.getLogger(__name__)``; the CLI entry point
calls :func:`configure_logging` once to decide where those records go.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

PACKAGE_LOGGER = "ledgercoder"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL = "WARNING"


def parse_level(level: int | str | None) -> int:
    """Accept a level number, a numeric string or a level name."""
    if isinstance(level, int):
        return level
    if level is None or not level.strip():
        return logging.getLevelName(DEFAULT_LEVEL)
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = logging.getLevelName(level)
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"Unknown log level '{level}'")


def configure_logging(level: int | str | None = DEFAULT_LEVEL, log_file: Optional[str | Path] = None) -> logging.Logger:
    """Attach a single handler to the package logger.

    Records go to stderr, or to ``log_file`` when given. Calling this again
    replaces the handler installed by the previous call.

    Raises:
        ValueError: If the level name is not recognized
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    numeric_level = parse_level(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(numeric_level)

    logger.setLevel(numeric_level)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False
    return logger
