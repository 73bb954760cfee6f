"""Capturing microphone audio, mixing it to mono and encoding it with ffmpeg."""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
import sys
import tempfile
import threading
import wave
from array import array
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

from ostt.ffmpeg import find_ffmpeg

__all__ = [
    "AudioError",
    "AudioRecorder",
    "downmix_to_mono",
    "write_wav",
    "convert_with_ffmpeg",
    "list_input_devices",
    "find_device",
]

logger = logging.getLogger(__name__)

PathArg = str | os.PathLike[str]

_CHUNK_SIZE = 1024


class AudioError(Exception):
    """Raised when audio cannot be captured, saved or encoded."""


def _trunc_div(total: int, count: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(total) // count
    return quotient if total >= 0 else -quotient


def downmix_to_mono(data: Sequence[int], channels: int) -> list[int]:
    """Average interleaved multi-channel samples into mono.

    Trailing samples that do not make up a whole frame are dropped.
    """
    if channels < 1:
        raise ValueError(f"channel count must be positive, got {channels}")
    if channels == 1:
        return list(data)
    frames = zip(*[iter(data)] * channels)
    return [_trunc_div(sum(frame), channels) for frame in frames]


def write_wav(samples: Iterable[int], sample_rate: int, path: PathArg) -> None:
    """Write 16-bit mono PCM samples as a WAV file."""
    pcm = array("h", samples)
    if sys.byteorder == "big":
        pcm.byteswap()
    with wave.open(str(path), "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(2)
        writer.setframerate(sample_rate)
        writer.writeframes(pcm.tobytes())
    logger.debug("Temporary WAV created: %s", path)


def convert_with_ffmpeg(input_wav: PathArg, output_path: PathArg, output_format: str) -> None:
    """Encode a WAV file with ffmpeg.

    ``output_format`` is "codec [options]", e.g. "mp3 -ab 16k -ar 12000".
    The output is always mono.
    """
    parts = output_format.split()
    if not parts:
        raise AudioError("Invalid format string: empty")
    codec, *options = parts

    ffmpeg = find_ffmpeg()
    command = [
        str(ffmpeg),
        "-loglevel",
        "error",
        "-i",
        str(input_wav),
        "-acodec",
        codec,
        "-ac",
        "1",
        "-y",
        *options,
        str(output_path),
    ]
    result = subprocess.run(command, capture_output=True, check=False)
    if result.returncode != 0:
        message = result.stderr.decode("utf-8", errors="replace")
        logger.error("ffmpeg conversion failed: %s", message)
        raise AudioError(f"Audio encoding failed: {message}")
    logger.debug("Audio converted to %s format", codec)


@contextlib.contextmanager
def _suppress_stderr() -> Iterator[None]:
    """Silence native library chatter on stderr (ALSA on Linux)."""
    if not sys.platform.startswith("linux"):
        yield
        return
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
    except OSError as exc:
        raise AudioError(f"Failed to open /dev/null: {exc}") from exc
    try:
        saved = os.dup(2)
    except OSError as exc:
        os.close(devnull)
        raise AudioError("Failed to duplicate stderr") from exc
    try:
        try:
            os.dup2(devnull, 2)
        except OSError as exc:
            raise AudioError("Failed to redirect stderr") from exc
        try:
            yield
        finally:
            os.dup2(saved, 2)
    finally:
        os.close(saved)
        os.close(devnull)


def _sdl_audio() -> Any:
    """Return the SDL audio module with the audio subsystem initialised."""
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    try:
        import pygame
        from pygame._sdl2 import audio as sdl_audio
    except ImportError as exc:
        raise AudioError(f"Audio support is unavailable: {exc}") from exc
    if not pygame.mixer.get_init():
        try:
            pygame.mixer.init()
        except pygame.error as exc:
            raise AudioError(f"Failed to initialise audio: {exc}") from exc
    return sdl_audio


def list_input_devices() -> list[str]:
    """Return the names of all audio input devices, in index order."""
    with _suppress_stderr():
        sdl_audio = _sdl_audio()
        try:
            names = sdl_audio.get_audio_device_names(True)
        except RuntimeError as exc:
            raise AudioError(f"Failed to enumerate audio devices: {exc}") from exc
    return list(names)


def _parse_index(spec: str) -> int | None:
    digits = spec[1:] if spec.startswith("+") else spec
    if digits.isascii() and digits.isdigit():
        return int(digits)
    return None


def find_device(device_spec: str, devices: Sequence[str] | None = None) -> str:
    """Resolve a device given by numeric index or by exact name to its name."""
    names = list(devices) if devices is not None else list_input_devices()

    index = _parse_index(device_spec)
    if index is not None:
        if index < len(names):
            return names[index]
        raise AudioError(
            f"Device index {index} is out of range (0-{max(len(names) - 1, 0)})"
        )

    if device_spec in names:
        return device_spec
    raise AudioError(
        f"Audio input device '{device_spec}' not found. "
        "Use 'ostt list-devices' to see available devices."
    )


class AudioRecorder:
    """Records mono 16-bit audio from an input device, with pause support."""

    def __init__(self, requested_sample_rate: int, device_name: str = "default") -> None:
        self._sample_rate = requested_sample_rate
        self.device_name = device_name
        self._samples: list[int] = []
        self._lock = threading.Lock()
        self._paused = False
        self._channels = 1
        self._stream: Any = None

    def start_recording(self) -> None:
        """Open the input device and start capturing."""
        with _suppress_stderr():
            sdl_audio = _sdl_audio()
            available = list(sdl_audio.get_audio_device_names(True))
            if self.device_name == "default":
                if not available:
                    raise AudioError("No audio input device available")
                device_name = None
            else:
                device_name = find_device(self.device_name, available)
            try:
                stream = sdl_audio.AudioDevice(
                    devicename=device_name,
                    iscapture=True,
                    frequency=self._sample_rate,
                    audioformat=sdl_audio.AUDIO_S16,
                    numchannels=1,
                    chunksize=_CHUNK_SIZE,
                    allowed_changes=(
                        sdl_audio.AUDIO_ALLOW_FREQUENCY_CHANGE
                        | sdl_audio.AUDIO_ALLOW_CHANNELS_CHANGE
                    ),
                    callback=self._on_audio,
                )
            except RuntimeError as exc:
                raise AudioError(f"Failed to open audio input stream: {exc}") from exc

        logger.info("Recording device: %s", device_name or "default")
        device_rate = int(stream.frequency)
        channels = int(stream.numchannels)
        if device_rate != self._sample_rate:
            logger.warning(
                "Requested sample rate %dHz but device uses %dHz. Recording at device rate.",
                self._sample_rate,
                device_rate,
            )
        logger.debug("Device configuration: %dHz, %d channels", device_rate, channels)

        self._sample_rate = device_rate
        self._channels = max(channels, 1)
        stream.pause(0)
        self._stream = stream
        logger.debug("Audio stream started")

    def _on_audio(self, _device: Any, buffer: Any) -> None:
        pcm = array("h")
        pcm.frombytes(bytes(buffer))
        if sys.byteorder == "big":
            pcm.byteswap()
        self.add_chunk(pcm)

    def add_chunk(self, data: Sequence[int]) -> None:
        """Append interleaved samples, mixed to mono; ignored while paused."""
        with self._lock:
            if self._paused:
                return
            self._samples.extend(downmix_to_mono(data, self._channels))

    def stop_recording(self, output_path: PathArg | None = None, output_format: str = "mp3") -> None:
        """Stop capturing and, if a path is given, encode the recording there."""
        if self._stream is not None:
            self._stream.pause(1)
            self._stream = None

        samples = self.samples()
        if not samples:
            logger.warning("Recording stopped with no samples captured")
            return

        logger.info(
            "Recording stopped: %.2fs (%d samples at %dHz)",
            len(samples) / self._sample_rate,
            len(samples),
            self._sample_rate,
        )

        if output_path is None:
            return

        temp_wav = Path(tempfile.gettempdir()) / f"ostt_{os.getpid()}.wav"
        write_wav(samples, self._sample_rate, temp_wav)
        convert_with_ffmpeg(temp_wav, output_path, output_format)
        try:
            temp_wav.unlink()
        except OSError as exc:
            logger.debug("Failed to remove temp file: %s", exc)

        size = Path(output_path).stat().st_size
        logger.info("Audio saved: %s (%d bytes, format: %s)", output_path, size, output_format)

    def samples(self) -> list[int]:
        """Return a copy of all recorded samples."""
        with self._lock:
            return list(self._samples)

    def sample_count(self) -> int:
        """Return the number of recorded samples."""
        with self._lock:
            return len(self._samples)

    def sample_rate(self) -> int:
        """Return the actual recording sample rate."""
        return self._sample_rate

    def pause(self) -> None:
        """Stop keeping samples without closing the stream."""
        with self._lock:
            self._paused = True
        logger.info("Recording paused")

    def resume(self) -> None:
        """Keep samples again after a pause."""
        with self._lock:
            self._paused = False
        logger.info("Recording resumed")

    def is_paused(self) -> bool:
        """Return whether recording is paused."""
        with self._lock:
            return self._paused

    def toggle_pause(self) -> None:
        """Switch between paused and recording."""
        with self._lock:
            self._paused = not self._paused
            paused = self._paused
        logger.info("Recording paused" if paused else "Recording resumed")