"""
Logging configuration — central setup for the agentconfig CLI.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console output goes to stderr so that stdout carries only command
results (``agentconfig detect`` must print nothing but the labels).
Records are tagged ``[INFO]``, ``[SUCCESS]``, ``[WARNING]``, ``[ERROR]``
and coloured when stderr is a terminal.

Levels are resolved in precedence order:
    CLI flag  >  AGENTCONFIG_LOG_LEVEL env var  >  WARNING (default)

Optional file output via AGENTCONFIG_LOG_FILE / AGENTCONFIG_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

import click

# Between INFO and WARNING: shown with --verbose, hidden by default
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_TAG_COLORS = {
    "DEBUG": "white",
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}

_FMT_DEBUG_SUFFIX = " (%(name)s:%(lineno)d)"
_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


class TaggedFormatter(logging.Formatter):
    """``[LEVEL] message`` with an optionally coloured tag."""

    def __init__(self, *, color: bool = False, show_origin: bool = False) -> None:
        fmt = "%(message)s" + (_FMT_DEBUG_SUFFIX if show_origin else "")
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.color:
            tag = click.style(tag, fg=_TAG_COLORS.get(record.levelname, "white"), bold=True)
        return f"{tag} {super().format(record)}"


def success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log at SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
    color: bool | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Level name (DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        quiet_third_party: Keep noisy third-party loggers at WARNING
            unless we're at DEBUG level.
        color: Colour the level tags. Defaults to whether stderr is a TTY.
    """
    numeric_level = _parse_level(level)
    if color is None:
        color = sys.stderr.isatty()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(
        TaggedFormatter(color=color, show_origin=numeric_level <= logging.DEBUG)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
