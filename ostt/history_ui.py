"""Interactive terminal viewer for browsing and copying past transcriptions."""

from __future__ import annotations

import contextlib
import logging
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import blessed

from ostt.clipboard import copy_to_clipboard
from ostt.history import HistoryManager, TranscriptionEntry

__all__ = ["ListState", "Exit", "Select", "HistoryViewer", "handle_history"]

logger = logging.getLogger(__name__)

BG = (0, 0, 0)
FG = (255, 255, 255)
HIGHLIGHT_BG = (20, 20, 20)
NOTIFICATION_BG = (0, 128, 0)
NOTIFICATION_FG = (0, 0, 0)

NOTIFICATION_SECONDS = 0.5
INPUT_POLL = 0.05
NOTIFICATION_TEXT = "Copied to clipboard!"
HELP_TEXT = "↑↓ select, ↵ copy, q quit"
TITLE = " History "
LOGO = (" ┏┓┏╋╋ ", " ┗┛┛┗┗ ")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ListState:
    """Selection and scroll position in a list of ``length`` items."""

    length: int
    selected: int | None = None
    offset: int = 0

    def select_next(self) -> None:
        """Move the selection down one item, stopping at the last."""
        if self.length <= 0:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, self.length - 1)

    def select_previous(self) -> None:
        """Move the selection up one item, stopping at the first."""
        if self.length <= 0:
            self.selected = None
        elif self.selected is None:
            self.selected = self.length - 1
        else:
            self.selected = max(self.selected - 1, 0)

    def _scroll_into_view(self, visible: int) -> None:
        if self.selected is None or visible <= 0:
            return
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + visible:
            self.offset = self.selected - visible + 1


@dataclass(frozen=True)
class Exit:
    """The user asked to leave the viewer."""


@dataclass(frozen=True)
class Select:
    """The user chose an entry's text."""

    text: str


class HistoryViewer:
    """Full-screen list of transcriptions; Enter picks one, q or Escape leaves."""

    def __init__(self, entries: Sequence[TranscriptionEntry], term: Any = None) -> None:
        self._term = term if term is not None else blessed.Terminal()
        self._stack = contextlib.ExitStack()
        try:
            self._stack.enter_context(self._term.raw())
            self._stack.enter_context(self._term.fullscreen())
            self._stack.enter_context(self._term.hidden_cursor())
        except BaseException:
            self._stack.close()
            raise
        self.closed = False
        self.entries = list(entries)
        self.list_state = ListState(len(self.entries), 0 if self.entries else None)
        self.notification: tuple[str, float] | None = None
        self._highlight_rows: set[int] = set()
        self._modal: tuple[int, int, int] | None = None

    def __enter__(self) -> HistoryViewer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()

    def handle_key(self, key: Any) -> Exit | Select | None:
        """Apply a key press and return the action it leads to, if any."""
        name = getattr(key, "name", None)
        if key == "q" or key == "\x1b" or name == "KEY_ESCAPE":
            logger.info("History viewer exited via Escape/q")
            return Exit()
        if name == "KEY_UP":
            self.list_state.select_previous()
            return None
        if name == "KEY_DOWN":
            self.list_state.select_next()
            return None
        if name == "KEY_ENTER" or key in ("\r", "\n"):
            index = self.list_state.selected
            if index is not None:
                logger.info("Entry selected via Enter")
                return Select(self.entries[index].text)
        return None

    def run(self) -> str | None:
        """Run the viewer until the user leaves; return the chosen text, if any."""
        if not self.entries:
            self.cleanup()
            return None

        logger.info("History viewer started with %d entries", len(self.entries))
        selected_text: str | None = None
        try:
            while True:
                self._draw()
                if self.notification is not None:
                    if time.monotonic() - self.notification[1] >= NOTIFICATION_SECONDS:
                        self.notification = None
                        if selected_text is not None:
                            break
                key = self._term.inkey(timeout=INPUT_POLL)
                if not key:
                    continue
                action = self.handle_key(key)
                if isinstance(action, Exit):
                    break
                if isinstance(action, Select):
                    selected_text = action.text
                    self.notification = (NOTIFICATION_TEXT, time.monotonic())
        finally:
            self.cleanup()
        return selected_text

    def cleanup(self) -> None:
        """Leave the alternate screen and restore the terminal."""
        if self.closed:
            return
        self._stack.close()
        self._term.stream.flush()
        self.closed = True
        logger.debug("History viewer terminal cleanup complete")

    # -- rendering -------------------------------------------------------

    def _frame_lines(self, width: int, height: int) -> list[str]:
        grid = [[" "] * width for _ in range(height)]
        self._highlight_rows = set()
        self._modal = None

        def put(y: int, x: int, text: str, limit: int) -> None:
            if not 0 <= y < height or limit <= 0:
                return
            for offset, char in enumerate(text[:limit]):
                if 0 <= x + offset < width:
                    grid[y][x + offset] = char

        inner_x, inner_y = 1, 1
        inner_w, inner_h = max(width - 2, 0), max(height - 2, 0)
        header_h = min(3, inner_h)
        footer_h = 1 if inner_h - header_h >= 1 else 0
        list_h = inner_h - header_h - footer_h

        for row, text in enumerate(LOGO[:header_h]):
            put(inner_y + row, inner_x, text, inner_w)

        list_y = inner_y + header_h
        if list_h >= 2 and inner_w >= 2:
            put(list_y, inner_x, "┌" + "─" * (inner_w - 2) + "┐", inner_w)
            put(list_y, inner_x + 1, TITLE, inner_w - 2)
            for row in range(1, list_h - 1):
                put(list_y + row, inner_x, "│", 1)
                put(list_y + row, inner_x + inner_w - 1, "│", 1)
            put(list_y + list_h - 1, inner_x, "└" + "─" * (inner_w - 2) + "┘", inner_w)

            body_h = max(list_h - 3, 0)
            body_w = inner_w - 2
            visible = body_h // 2
            state = self.list_state
            state._scroll_into_view(visible)
            stop = min(state.offset + visible, len(self.entries))
            for slot, index in enumerate(range(state.offset, stop)):
                entry = self.entries[index]
                selected = index == state.selected
                prefix = "> " if selected else "  "
                y = list_y + 1 + slot * 2
                timestamp = entry.created_at.strftime(TIMESTAMP_FORMAT)
                text = entry.text.replace("\r", " ").replace("\n", " ")
                put(y, inner_x + 1, prefix + timestamp, body_w)
                put(y + 1, inner_x + 1, "  " + text, body_w)
                if selected:
                    self._highlight_rows.update((y, y + 1))

        if footer_h:
            left = max((inner_w - len(HELP_TEXT)) // 2, 0)
            put(inner_y + inner_h - 1, inner_x + left, HELP_TEXT, inner_w - left)

        if self.notification is not None:
            message = self.notification[0]
            modal_w = min(len(message) + 4, width)
            if height >= 3 and modal_w >= 2:
                modal_x = max(width - modal_w, 0) // 2
                modal_y = max(height - 3, 0) // 2
                inside = modal_w - 2
                pad = max((inside - len(message)) // 2, 0)
                middle = (" " * pad + message).ljust(inside)[:inside]
                put(modal_y, modal_x, "┌" + "─" * inside + "┐", modal_w)
                put(modal_y + 1, modal_x, "│" + middle + "│", modal_w)
                put(modal_y + 2, modal_x, "└" + "─" * inside + "┘", modal_w)
                self._modal = (modal_y, modal_x, modal_w)

        return ["".join(row) for row in grid]

    def _rgb(self, fg: tuple[int, int, int], bg: tuple[int, int, int]) -> str:
        return self._term.color_rgb(*fg) + self._term.on_color_rgb(*bg)

    def _style_row(self, y: int, line: str) -> str:
        normal = self._term.normal
        bg = HIGHLIGHT_BG if y in self._highlight_rows else BG
        base = self._rgb(FG, bg)
        if self._modal is not None:
            modal_y, modal_x, modal_w = self._modal
            if modal_y <= y < modal_y + 3:
                green = self._rgb(NOTIFICATION_FG, NOTIFICATION_BG)
                end = modal_x + modal_w
                return (
                    base + line[:modal_x]
                    + green + line[modal_x:end]
                    + base + line[end:] + normal
                )
        return base + line + normal

    def _draw(self) -> None:
        width = max(self._term.width, 0)
        height = max(self._term.height, 0)
        lines = self._frame_lines(width, height)
        if self._term.does_styling:
            lines = [self._style_row(y, line) for y, line in enumerate(lines)]
        out = self._term.home + "".join(
            self._term.move_yx(y, 0) + line for y, line in enumerate(lines)
        )
        self._term.stream.write(out)
        self._term.stream.flush()


def handle_history(data_dir: str | os.PathLike[str] | None = None) -> str | None:
    """Show the history viewer and copy the chosen transcription to the clipboard."""
    logger.info("=== ostt History Viewer ===")
    directory = Path(data_dir) if data_dir is not None else Path.home() / ".local" / "share" / "ostt"

    with HistoryManager(directory) as manager:
        entries = manager.get_all_transcriptions()

    if not entries:
        print("No transcription history found.")
        return None

    viewer = HistoryViewer(entries)
    selected = viewer.run()
    if selected is not None:
        copy_to_clipboard(selected)
        logger.info("Selected transcription copied to clipboard")
    else:
        logger.info("History viewer exited without selection")
    logger.info("History viewer closed")
    return selected