"""Showing the most recent entries of the application log."""

from __future__ import annotations

import logging
import os
from pathlib import Path

__all__ = ["DEFAULT_LINES", "find_latest_log", "handle_logs"]

logger = logging.getLogger(__name__)

DEFAULT_LINES = 50
LOGO = (" ┏┓┏╋╋ ", " ┗┛┛┗┗ ")


def _default_log_dir() -> Path:
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state is not None:
        return Path(xdg_state) / "ostt"
    return Path.home() / ".local" / "state" / "ostt"


def find_latest_log(directory: str | os.PathLike[str]) -> Path:
    """Return the most recently modified file whose name contains "ostt.log"."""
    directory = Path(directory)
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise OSError(f"Failed to read log directory: {exc}") from exc

    latest: tuple[Path, int] | None = None
    for path in entries:
        if "ostt.log" not in path.name:
            continue
        try:
            modified = path.stat().st_mtime_ns
        except OSError:
            continue
        if latest is None or modified > latest[1]:
            latest = (path, modified)

    if latest is None:
        raise FileNotFoundError(f"No log files found in {directory}")
    return latest[0]


def handle_logs(directory: str | os.PathLike[str] | None = None) -> list[str]:
    """Print the last lines of the newest log file and return the lines shown."""
    log_dir = Path(directory) if directory is not None else _default_log_dir()

    if not log_dir.exists():
        print(f"Log directory does not exist yet: {log_dir}")
        print("Logs will be created when the application runs.")
        return []

    log_file = find_latest_log(log_dir)

    try:
        content = log_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"Failed to read log file: {exc}") from exc

    if not content:
        print(f"Log file is empty: {log_file}")
        return []

    lines = content.splitlines()
    shown = lines[-DEFAULT_LINES:]

    print()
    for line in LOGO:
        print(line)
    print()
    if len(lines) > DEFAULT_LINES:
        print(f"Showing last {DEFAULT_LINES} of {len(lines)} lines:")
    else:
        print(f"Showing all {len(lines)} lines:")
    print(f"Full log file at: {log_file}")
    print()
    for line in shown:
        print(line)
    return shown