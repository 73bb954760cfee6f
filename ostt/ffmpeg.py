"""Locating the ffmpeg binary."""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

__all__ = ["FfmpegNotFoundError", "find_in_path", "find_ffmpeg"]

logger = logging.getLogger(__name__)

_MACOS_CANDIDATES = ("/opt/homebrew/bin/ffmpeg", "/usr/local/bin/ffmpeg", "/usr/bin/ffmpeg")
_LINUX_CANDIDATES = ("/usr/bin/ffmpeg", "/usr/local/bin/ffmpeg", "/snap/bin/ffmpeg")
_WINDOWS_CANDIDATES = (
    "C:\\ffmpeg\\bin\\ffmpeg.exe",
    "C:\\Program Files\\ffmpeg\\bin\\ffmpeg.exe",
    "C:\\Program Files (x86)\\ffmpeg\\bin\\ffmpeg.exe",
)


class FfmpegNotFoundError(FileNotFoundError):
    """Raised when a required binary cannot be located."""


def _candidates() -> tuple[str, ...]:
    if sys.platform == "darwin":
        return _MACOS_CANDIDATES
    if sys.platform.startswith("linux"):
        return _LINUX_CANDIDATES
    if sys.platform == "win32":
        return _WINDOWS_CANDIDATES
    return ()


def find_in_path(binary_name: str) -> Path:
    """Search PATH for a binary and return its path."""
    found = shutil.which(binary_name)
    if found:
        return Path(found)
    raise FfmpegNotFoundError(
        f"{binary_name} not found. Please install {binary_name}:\n"
        "macOS: brew install ffmpeg\n"
        "Linux: apt install ffmpeg (Debian/Ubuntu) or dnf install ffmpeg (Fedora)\n"
        "Windows: download a build from the FFmpeg website"
    )


def find_ffmpeg() -> Path:
    """Return the ffmpeg binary, checking standard install locations before PATH."""
    for candidate in map(Path, _candidates()):
        if candidate.exists():
            logger.debug("Found ffmpeg at: %s", candidate)
            return candidate
    path = find_in_path("ffmpeg")
    logger.debug("Found ffmpeg in PATH at: %s", path)
    return path