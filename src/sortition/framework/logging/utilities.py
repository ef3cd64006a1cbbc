"""
=================
Logging Utilities
=================

Sinks for the two audiences of sortition logs: people watching a terminal,
and analysts loading exposure records from disk.

"""
from __future__ import annotations

import sys
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG")

EXPOSURE_LOG_FILE = "exposures.log"


def configure_logging_to_terminal(verbosity: int, long_format: bool = True) -> int:
    """Replaces the default loguru handler with one that prints to stdout.

    Parameters
    ----------
    verbosity
        0 logs at the WARNING level, 1 at the INFO level, and 2 or more at the
        DEBUG level.
    long_format
        Whether messages include their level and, when bound, the experiment
        name.

    Returns
    -------
        The id of the new loguru handler.
    """
    try:
        logger.remove(0)
    except ValueError:
        pass
    return logger.add(
        sys.stdout,
        level=verbosity_to_level(verbosity),
        format=partial(_format_record, long_format=long_format),
        colorize=True,
    )


def configure_logging_to_file(output_directory: Path) -> int:
    """Writes every exposure record, serialized as JSON, to ``exposures.log``.

    Returns
    -------
        The id of the new loguru handler.
    """
    return logger.add(
        Path(output_directory) / EXPOSURE_LOG_FILE,
        level="TRACE",
        filter=_is_exposure,
        serialize=True,
    )


def verbosity_to_level(verbosity: int) -> str:
    """Maps a count of ``-v`` style flags to a loguru level."""
    if verbosity < 0:
        raise ValueError(f"Invalid verbosity level: {verbosity}")
    return VERBOSITY_LEVELS[min(verbosity, len(VERBOSITY_LEVELS) - 1)]


def normalize_log_level(level: str) -> str:
    """Validates a loguru level name, ignoring case."""
    normalized = str(level).upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Expected one of {LOG_LEVELS}.")
    return normalized


def _is_exposure(record: Record) -> bool:
    return record["extra"].get("event") == "exposure"


def _format_record(record: Record, long_format: bool) -> str:
    fields = ["<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>"]
    if long_format:
        fields.append("<level>{level: <8}</level>")
        if "experiment" in record["extra"]:
            fields.append("<cyan>{extra[experiment]}</cyan>")
    fields.append("<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>")
    return " | ".join(fields) + "\n{exception}"
