"""Copying text to the system clipboard with the platform's clipboard tool."""

from __future__ import annotations

import logging
import subprocess
import sys
import time

__all__ = ["copy_to_clipboard"]

logger = logging.getLogger(__name__)

_UNIX_TOOLS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("wl-copy", ("--type", "text/plain", "--trim-newline")),
    ("xclip", ("-selection", "clipboard", "-in", "-quiet")),
)


def _tools() -> list[tuple[str, tuple[str, ...]]]:
    tools: list[tuple[str, tuple[str, ...]]] = []
    if sys.platform == "darwin":
        tools.append(("pbcopy", ()))
    tools.extend(_UNIX_TOOLS)
    return tools


def _try_tool(name: str, args: tuple[str, ...], text: str) -> bool:
    try:
        child = subprocess.Popen([name, *args], stdin=subprocess.PIPE)
    except OSError:
        logger.debug("%s not found or not executable", name)
        return False
    if child.stdin is None:
        return False
    try:
        child.stdin.write(text.encode("utf-8"))
        child.stdin.close()
    except OSError as exc:
        logger.warning("Failed to write to %s stdin: %s", name, exc)
        return False
    time.sleep(0.1)
    logger.info("Transcribed text copied to clipboard via %s", name)
    return True


def copy_to_clipboard(text: str) -> str | None:
    """Copy text to the clipboard and return the tool used, or None.

    Tries pbcopy on macOS, then wl-copy, then xclip. A missing clipboard tool
    is only logged, never raised.
    """
    for name, args in _tools():
        if _try_tool(name, args, text):
            return name
    if sys.platform == "darwin":
        logger.warning("No clipboard tool available (pbcopy not found)")
    else:
        logger.warning("No clipboard tool available (wl-copy or xclip not found)")
    return None