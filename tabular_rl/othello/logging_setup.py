"""
Logger construction for the command-line entry points.

The process entry point calls setup_logger() once and passes the returned
handle to the Trainer (and through it to Game, Board and ModelStore). Library
code never adds or removes sinks.
"""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZ} [{level}] - {message}"


def setup_logger(level: str = "INFO", log_file: Optional[str] = None, console: bool = True):
    """Configure loguru sinks and return a bound logger handle.

    Args:
        level: Minimum level written to the console.
        log_file: Optional log file, truncated at start-up, written at
            the same level.
        console: Write to stderr at `level`.
    """
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {LOG_LEVELS}.")

    logger.remove()
    if console:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        logger.add(log_file, level=level, format=LOG_FORMAT, mode="w", encoding="utf-8")
    return logger.bind(component="othello")
