"""File-based logging with daily rotation in the XDG state directory."""

from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

__all__ = ["log_dir", "init_logging"]

LEVEL_ENV = "OSTT_LOG"
LOG_FILE = "ostt.log"

_LEVELS = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "OFF": logging.CRITICAL + 1,
}

_handler: logging.Handler | None = None


def log_dir() -> Path:
    """Return the log directory, creating it: $XDG_STATE_HOME/ostt or ~/.local/state/ostt."""
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state is not None:
        directory = Path(xdg_state) / "ostt"
    else:
        directory = Path.home() / ".local" / "state" / "ostt"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _level() -> int:
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    return _LEVELS.get(name, logging.DEBUG)


def init_logging() -> Path:
    """Send all log records to a daily-rotated file and return its directory.

    The level comes from $OSTT_LOG and defaults to debug. Nothing is written
    to the terminal.
    """
    global _handler
    if _handler is not None:
        raise RuntimeError("Logging already initialized")

    directory = log_dir()
    handler = TimedRotatingFileHandler(directory / LOG_FILE, when="midnight", encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [thread %(thread)d] %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(_level())
    root.addHandler(handler)
    _handler = handler

    logging.getLogger(__name__).info("Logging initialized. Log file: %s", directory)
    return directory