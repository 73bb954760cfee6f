"""Full-screen display of a human-readable error message."""

from __future__ import annotations

import contextlib
import logging
import textwrap
from typing import Any

import blessed

__all__ = ["wrap_centered", "ErrorScreen"]

logger = logging.getLogger(__name__)

ERROR_BG = (255, 0, 0)
ERROR_FG = (255, 255, 255)
INPUT_POLL = 0.1


def wrap_centered(message: str, width: int) -> list[str]:
    """Wrap each line of the message to ``width`` and centre it, padding to full width."""
    if width <= 0:
        return []
    lines: list[str] = []
    for paragraph in message.split("\n"):
        wrapped = textwrap.wrap(paragraph, width) or [""]
        for line in wrapped:
            left = (width - len(line)) // 2
            lines.append((" " * left + line).ljust(width))
    return lines


class ErrorScreen:
    """Red full-screen error display dismissed by any key."""

    def __init__(self, term: Any = None) -> None:
        self._term = term if term is not None else blessed.Terminal()
        self._stack = contextlib.ExitStack()
        try:
            self._stack.enter_context(self._term.raw())
            self._stack.enter_context(self._term.fullscreen())
        except BaseException:
            self._stack.close()
            raise
        self.closed = False

    def __enter__(self) -> ErrorScreen:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()

    def _frame_lines(self, message: str, width: int, height: int) -> list[str]:
        rows = [" " * width for _ in range(height)]
        padding_x = width // 10
        text_width = width * 80 // 100
        top = height // 2
        for offset, line in enumerate(wrap_centered(message, text_width)[: height // 2]):
            row = rows[top + offset]
            rows[top + offset] = row[:padding_x] + line + row[padding_x + len(line):]
        return rows

    def _draw(self, message: str) -> None:
        width = max(self._term.width, 0)
        height = max(self._term.height, 0)
        lines = self._frame_lines(message, width, height)
        if self._term.does_styling:
            style = self._term.color_rgb(*ERROR_FG) + self._term.on_color_rgb(*ERROR_BG)
            lines = [style + line + self._term.normal for line in lines]
        out = self._term.home + "".join(
            self._term.move_yx(y, 0) + line for y, line in enumerate(lines)
        )
        self._term.stream.write(out)
        self._term.stream.flush()

    def show_error(self, message: str) -> None:
        """Show the message on a red screen until any key is pressed."""
        while True:
            self._draw(message)
            if self._term.inkey(timeout=INPUT_POLL):
                break

    def cleanup(self) -> None:
        """Leave the alternate screen and restore the terminal."""
        if self.closed:
            return
        logger.debug("Cleaning up error screen")
        self._stack.close()
        self._term.stream.flush()
        self.closed = True
        logger.debug("Error screen cleanup complete")