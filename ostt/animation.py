"""Animated logo shown while a transcription is in progress."""

from __future__ import annotations

import math
import time

__all__ = ["TranscriptionAnimation"]

# Each letter of the logo: (top line, bottom line).
_GLYPHS: tuple[tuple[str, str], ...] = (
    ("┏┓", "┗┛"),  # o
    ("┏", "┛"),  # s
    ("╋", "┗"),  # t
    ("╋", "┗"),  # t
)

PHASE_STEP = 0.03
SLIDE_IN_END = 0.35
PAUSE_END = 0.60
SLIDE_OUT_END = 0.95
OFFSCREEN_MARGIN = 5
MIN_DURATION = 5.0


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class TranscriptionAnimation:
    """Letters slide in from the right, hold in the centre, then slide out left."""

    def __init__(self, terminal_width: int = 80) -> None:
        del terminal_width  # the width is taken at each render instead
        self.frame_count = 0
        self._start_time = time.monotonic()

    def is_running(self) -> bool:
        """Return True while the minimum display duration has not elapsed."""
        return self.elapsed_secs() < MIN_DURATION

    def elapsed_secs(self) -> float:
        """Return the seconds since the animation started."""
        return time.monotonic() - self._start_time

    def update(self) -> None:
        """Advance to the next frame."""
        self.frame_count = (self.frame_count + 1) & 0xFFFFFFFF

    def positions(self, width: int) -> list[float]:
        """Return the x position of every letter for the current frame."""
        phase = (self.frame_count * PHASE_STEP) % 1.0
        widths = [len(top) for top, _ in _GLYPHS]
        center_x = width // 2 - sum(widths) // 2

        count = len(_GLYPHS)
        per_char_in = SLIDE_IN_END / count
        per_char_out = (SLIDE_OUT_END - PAUSE_END) / count
        start_x = width + OFFSCREEN_MARGIN
        end_x = -OFFSCREEN_MARGIN

        result: list[float] = []
        target_x = center_x
        for index, glyph_width in enumerate(widths):
            slide_in_start = index * per_char_in
            slide_in_end = slide_in_start + per_char_in
            slide_out_start = PAUSE_END + index * per_char_out
            slide_out_end = slide_out_start + per_char_out

            if slide_in_start <= phase < slide_in_end:
                progress = (phase - slide_in_start) / per_char_in
                x = start_x - (start_x - target_x) * progress
            elif slide_out_start <= phase < slide_out_end:
                progress = (phase - slide_out_start) / per_char_out
                x = target_x - (target_x - end_x) * progress
            elif phase < slide_in_start:
                x = float(start_x)
            elif phase >= slide_out_end:
                x = float(end_x)
            else:
                x = float(target_x)
            result.append(float(x))
            target_x += glyph_width
        return result

    def render_lines(self, width: int, height: int) -> list[str]:
        """Return the current frame as ``height`` rows of ``width`` characters."""
        grid = [[" "] * width for _ in range(height)]
        center_y = height // 2
        for x_pos, (top, bottom) in zip(self.positions(width), _GLYPHS):
            x = _round_half_away(x_pos)
            glyph_width = len(top)
            if x < 0 or x + glyph_width > width:
                continue
            for y, text in ((center_y - 1, top), (center_y, bottom)):
                if 0 <= y < height:
                    grid[y][x : x + glyph_width] = list(text)
        return ["".join(row) for row in grid]