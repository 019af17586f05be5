"""
Logging for the docsite CLI.

Everything under the ``docsite`` logger goes to the console through
``click``, so records land on whatever stderr click is writing to
(``CliRunner`` included) and are coloured by level. ``--log-file`` adds
a file that receives every record at DEBUG, for reading back a failed
CI build.

Level precedence:  --debug > --verbose > --quiet > --log-level /
DOCSITE_LOG_LEVEL > WARNING
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

LOGGER_NAME = "docsite"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LEVEL_COLORS = {
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}

_DEBUG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_INFO_FORMAT = "%(asctime)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"

# The build command prints its own line per stage
_STAGE_LOGGER = "docsite.core.engine.stages"


class ClickHandler(logging.Handler):
    """Emit records on stderr with ``click.secho``."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.secho(self.format(record), err=True, fg=_LEVEL_COLORS.get(record.levelno))
        except Exception:
            self.handleError(record)


class StageEchoFilter(logging.Filter):
    """Hide routine stage records from the console; warnings still pass."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING or not record.name.startswith(_STAGE_LOGGER)


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    level_name: str | None = None,
) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    if level_name and level_name.upper() in LEVEL_NAMES:
        return logging.getLevelName(level_name.upper())
    return logging.WARNING


def setup_logging(level: int = logging.WARNING, log_file: Path | None = None) -> logging.Logger:
    """(Re)configure the ``docsite`` logger. Safe to call once per command."""
    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    console = ClickHandler(level)
    if level <= logging.DEBUG:
        console.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt="%H:%M:%S"))
    elif level <= logging.INFO:
        console.setFormatter(logging.Formatter(_INFO_FORMAT, datefmt="%H:%M:%S"))
        console.addFilter(StageEchoFilter())
    else:
        console.setFormatter(logging.Formatter("%(message)s"))
        console.addFilter(StageEchoFilter())
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file is not None else level)
    return logger
