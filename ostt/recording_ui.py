"""Terminal interface for recording: waveform, volume meter and key handling."""

from __future__ import annotations

import contextlib
import logging
import math
import time
from collections.abc import Sequence
from enum import Enum
from typing import Any

import blessed

from ostt.animation import TranscriptionAnimation

__all__ = ["RecordingCommand", "VolumeMeter", "format_duration", "OsttTui"]

logger = logging.getLogger(__name__)

SAMPLE_INTERVAL = 0.05
INPUT_POLL = 0.05
PEAK_HOLD_SECONDS = 3
SPARKLINE_MAX = 80
_BARS = " ▁▂▃▄▅▆▇█"


class RecordingCommand(Enum):
    """What the user asked for during recording."""

    CONTINUE = "continue"
    TRANSCRIBE = "transcribe"
    CANCEL = "cancel"
    TOGGLE_PAUSE = "toggle_pause"


class VolumeMeter:
    """Turns recent samples into a 0-100 level and tracks a 3-second peak hold."""

    def __init__(self, sample_rate: int, reference_level_db: int = -20) -> None:
        self.sample_rate = sample_rate
        self.reference_level_db = reference_level_db
        self.last_peak = 0
        self.peak_hold = 0
        self.peak_hold_time = time.monotonic()

    def calculate(self, samples: Sequence[int]) -> int:
        """Return the level of the last 50 ms of samples as a percentage."""
        if not samples:
            return 0
        count = min(self.sample_rate // 20, len(samples))
        if count <= 0:
            return 0
        recent = samples[len(samples) - count :]
        mean_square = sum(sample * sample for sample in recent) // len(recent)
        rms = math.sqrt(mean_square)
        db_fs = 20.0 * math.log10(rms / 32767.0) if rms > 0 else -160.0

        min_db = self.reference_level_db - 40.0
        normalized = int(min(max((db_fs - min_db) / 40.0 * 100.0, 4.0), 100.0))
        self.last_peak = normalized

        now = time.monotonic()
        if normalized > self.peak_hold or now - self.peak_hold_time >= PEAK_HOLD_SECONDS:
            self.peak_hold = normalized
            self.peak_hold_time = now
        return normalized


def format_duration(seconds: float) -> str:
    """Format whole seconds as m:ss."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def _sparkline_rows(data: Sequence[int], height: int, maximum: int) -> list[str]:
    """Render bars for each value, top row first, using eighth-block characters."""
    levels = [min(value, maximum) * height * 8 // maximum for value in data]
    rows = []
    for row in range(height):
        floor = (height - 1 - row) * 8
        rows.append("".join(_BARS[max(0, min(level - floor, 8))] for level in levels))
    return rows


class OsttTui:
    """Full-screen recording view driven by a blessed terminal."""

    def __init__(
        self,
        sample_rate: int,
        peak_volume_threshold: int = 90,
        reference_level_db: int = -20,
        term: Any = None,
    ) -> None:
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

        self.sample_rate = sample_rate
        self.peak_volume_threshold = peak_volume_threshold
        self.terminal_width = max(self._term.width, 0)
        self.volume_history: list[int] = [0] * self.terminal_width
        self._meter = VolumeMeter(sample_rate, reference_level_db)

        now = time.monotonic()
        self._last_sample_time = now
        self._recording_start = now
        self.is_paused = False
        self._pause_duration = 0.0
        self._pause_start: float | None = None

    # -- styling helpers -------------------------------------------------

    def _rgb(self, fg: tuple[int, int, int] | None, bg: tuple[int, int, int] | None) -> str:
        if not self._term.does_styling:
            return ""
        style = ""
        if fg is not None:
            style += self._term.color_rgb(*fg)
        if bg is not None:
            style += self._term.on_color_rgb(*bg)
        return style

    def _paint(self, text: str, style: str) -> str:
        return f"{style}{text}{self._term.normal}" if style else text

    def _draw(self, lines: list[str]) -> None:
        out = self._term.home + "".join(
            self._term.move_yx(y, 0) + line for y, line in enumerate(lines)
        )
        self._term.stream.write(out)
        self._term.stream.flush()

    # -- rendering -------------------------------------------------------

    def render_waveform(self, samples: Sequence[int]) -> None:
        """Update the volume history with the current level and redraw the screen."""
        volume = self._meter.calculate(samples)

        now = time.monotonic()
        if not self.is_paused and now - self._last_sample_time >= SAMPLE_INTERVAL:
            self.volume_history.append(volume)
            if len(self.volume_history) > self.terminal_width:
                del self.volume_history[0]
            self._last_sample_time = now

        width = max(self._term.width, 0)
        if width != self.terminal_width:
            self.terminal_width = width
            excess = len(self.volume_history) - width
            if excess > 0:
                del self.volume_history[:excess]
            elif excess < 0:
                self.volume_history[:0] = [0] * -excess

        self._draw(self._waveform_lines())

    def _waveform_lines(self) -> list[str]:
        width = self.terminal_width
        height = max(self._term.height, 0)
        content_height = max(height - 1, 0)
        top_height = content_height // 3 * 2
        bottom_height = content_height - top_height

        top_style = self._rgb((206, 224, 220), (0, 0, 0))
        top = [
            self._paint(row.ljust(width)[:width], top_style)
            for row in _sparkline_rows(self.volume_history, top_height, SPARKLINE_MAX)
        ]
        inverted = [max(100 - value, 0) for value in self.volume_history]
        bottom_style = self._rgb((0, 0, 0), (185, 207, 212))
        bottom = [
            self._paint(row.ljust(width)[:width], bottom_style)
            for row in _sparkline_rows(inverted, bottom_height, SPARKLINE_MAX)
        ]
        lines = top + bottom
        if height >= 1:
            lines.append(self._footer())
        return lines

    def _footer(self) -> str:
        if self.is_paused:
            display_peak, display_volume = 0, 0
            indicator = self._paint("⏸ ", self._term.yellow if self._term.does_styling else "")
        else:
            display_peak, display_volume = self._meter.peak_hold, self._meter.last_peak
            indicator = self._paint("● ", self._term.red if self._term.does_styling else "")

        peak_style = (
            self._rgb((255, 255, 255), None) + self._term.on_red
            if self._term.does_styling and display_peak >= self.peak_volume_threshold
            else ""
        )
        duration = format_duration(self.recording_duration())
        base = self._rgb((185, 207, 212), (0, 0, 0))
        return (
            indicator
            + self._paint(f"{duration} / {display_volume}% / ", base)
            + self._paint(f"{display_peak}%", peak_style)
        )

    # -- input and state -------------------------------------------------

    def handle_input(self) -> RecordingCommand:
        """Wait briefly for a key and map it to a recording command."""
        key = self._term.inkey(timeout=INPUT_POLL)
        if not key:
            return RecordingCommand.CONTINUE
        if key.name == "KEY_ENTER" or key in ("\r", "\n"):
            logger.info("Enter pressed: proceeding to transcription")
            return RecordingCommand.TRANSCRIBE
        if key.name == "KEY_ESCAPE" or key in ("q", "\x1b"):
            logger.info("Escape or 'q' pressed: canceling recording")
            return RecordingCommand.CANCEL
        if key == "\x03":
            logger.info("Ctrl+C pressed: canceling recording")
            return RecordingCommand.CANCEL
        if key == " ":
            logger.info("Space pressed: toggling pause")
            self.toggle_pause_state()
            return RecordingCommand.TOGGLE_PAUSE
        return RecordingCommand.CONTINUE

    def toggle_pause_state(self) -> None:
        """Pause or resume, keeping track of the total time spent paused."""
        now = time.monotonic()
        if self.is_paused:
            if self._pause_start is not None:
                self._pause_duration += now - self._pause_start
                self._pause_start = None
            self.is_paused = False
        else:
            self._pause_start = now
            self.is_paused = True

    def recording_duration(self) -> float:
        """Return the seconds recorded so far, not counting pauses."""
        now = time.monotonic()
        paused = self._pause_duration
        if self.is_paused and self._pause_start is not None:
            paused += now - self._pause_start
        return max(now - self._recording_start - paused, 0.0)

    def render_transcription_animation(self, animation: TranscriptionAnimation) -> None:
        """Draw one frame of the animation and advance it."""
        width = max(self._term.width, 0)
        height = max(self._term.height, 0)
        style = self._rgb((255, 255, 255), (0, 0, 0))
        if self._term.does_styling:
            style = self._term.bold + style
        lines = [self._paint(line, style) for line in animation.render_lines(width, height)]
        self._draw(lines)
        animation.update()

    def cleanup(self) -> None:
        """Leave the alternate screen and restore the terminal."""
        if self.closed:
            return
        logger.debug("Cleaning up terminal")
        self._stack.close()
        self._term.stream.flush()
        self.closed = True
        logger.debug("Terminal cleanup complete")