"""Recording audio, transcribing it and storing the result."""

from __future__ import annotations

import logging
import os
import signal
import sys
import tempfile
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from ostt import credentials
from ostt.animation import TranscriptionAnimation
from ostt.audio import AudioRecorder
from ostt.clipboard import copy_to_clipboard
from ostt.config import ConfigError, OsttConfig, config_path
from ostt.error_screen import ErrorScreen
from ostt.history import HistoryManager
from ostt.keywords import KeywordsManager
from ostt.providers import TranscriptionModel
from ostt.recording_ui import OsttTui, RecordingCommand
from ostt.transcription import TranscriptionConfig, TranscriptionError, transcribe

__all__ = ["extension_for_format", "transcribe_recording_with_animation", "handle_record"]

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "libopus": "ogg",
    "libvorbis": "ogg",
    "flac": "flac",
    "aac": "m4a",
    "pcm_s16le": "wav",
}
ANIMATION_INTERVAL = 0.05
RECORDING_BASENAME = "ostt-recording"


class _ReportedError(TranscriptionError):
    """A transcription failure with the message to show on the error screen."""

    def __init__(self, message: str, screen_message: str) -> None:
        super().__init__(message)
        self.screen_message = screen_message


def extension_for_format(output_format: str) -> str:
    """Return the file extension for an output format string such as "mp3 -ab 16k"."""
    parts = output_format.split()
    codec = parts[0] if parts else "mp3"
    return _EXTENSIONS.get(codec, codec)


def _config_dir() -> Path:
    return Path.home() / ".config" / "ostt"


def _data_dir() -> Path:
    return Path.home() / ".local" / "share" / "ostt"


def _show_error(message: str) -> None:
    with ErrorScreen() as screen:
        screen.show_error(message)


def transcribe_recording_with_animation(
    tui: Any,
    config: OsttConfig,
    model_id: str,
    audio_path: str | os.PathLike[str],
) -> str:
    """Transcribe a recording while the TUI shows the animation; store and copy the text."""
    model = TranscriptionModel.from_id(model_id)
    if model is None:
        raise _ReportedError(f"Unknown model: {model_id}", f"Error: Unknown model '{model_id}'")

    provider = model.provider()
    api_key = credentials.get_api_key(
        provider.id(), secrets_dir=credentials.default_secrets_dir()
    )
    if api_key is None:
        raise _ReportedError(
            f"No API key found for provider '{provider.id()}'. "
            "Please run 'ostt auth' to authorize this provider.",
            f"Error: No API key for {provider.display_name()}. Please run 'ostt auth'",
        )

    keywords = KeywordsManager(_config_dir()).load_keywords()
    transcription_config = TranscriptionConfig(model, api_key, keywords, config.providers)

    logger.info("Starting transcription with model '%s' for file '%s'", model_id, audio_path)
    animation = TranscriptionAnimation(80)

    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(transcribe, transcription_config, audio_path)
        while True:
            try:
                tui.render_transcription_animation(animation)
            except Exception as exc:  # a broken frame must not stop the transcription
                logger.warning("Failed to render animation: %s", exc)
            if future.done():
                break
            time.sleep(ANIMATION_INTERVAL)

        try:
            text = future.result()
        except TranscriptionError as exc:
            logger.error("Transcription failed: %s", exc)
            raise _ReportedError(str(exc), f"Error: Transcription failed - {exc}") from exc
        except Exception as exc:
            logger.error("Transcription task failed: %s", exc)
            raise _ReportedError(
                f"Transcription task failed: {exc}",
                f"Error: Transcription task failed - {exc}",
            ) from exc

    logger.info("Transcription completed successfully")
    logger.info("Transcribed text: %s", text)

    try:
        with HistoryManager(_data_dir()) as manager:
            manager.save_transcription(text)
    except Exception as exc:
        logger.warning("Failed to save transcription to history: %s", exc)

    copy_to_clipboard(text)
    return text


def _record_loop(tui: OsttTui, recorder: AudioRecorder, triggered: threading.Event) -> bool:
    """Run until the user finishes; return True if the recording should be transcribed."""
    frame_count = 0
    sample_rate = recorder.sample_rate()
    while True:
        if triggered.is_set():
            logger.info("Received SIGUSR1: transcribing via external trigger")
            return True

        command = tui.handle_input()
        if command is RecordingCommand.CONTINUE:
            frame_count += 1
            if frame_count % 60 == 0:
                logger.debug("Recording: %.1fs recorded", recorder.sample_count() / sample_rate)
            tui.render_waveform(recorder.samples())
        elif command is RecordingCommand.TRANSCRIBE:
            logger.info("User pressed Enter: transcribing recording")
            return True
        elif command is RecordingCommand.CANCEL:
            logger.info("User pressed Escape: canceling recording without transcription")
            return False
        elif command is RecordingCommand.TOGGLE_PAUSE:
            recorder.toggle_pause()
            tui.is_paused = recorder.is_paused()
            tui.render_waveform(recorder.samples())


def _install_trigger(triggered: threading.Event) -> Any:
    if not hasattr(signal, "SIGUSR1"):
        return None
    try:
        return signal.signal(signal.SIGUSR1, lambda _signum, _frame: triggered.set())
    except ValueError as exc:
        logger.warning("Failed to register signal handler: %s", exc)
        return None


def handle_record() -> None:
    """Record with a live waveform, then optionally transcribe and store the result."""
    logger.info("=== ostt Audio Recorder Started ===")

    try:
        config = OsttConfig.load(config_path())
    except Exception as exc:
        logger.error("Failed to load configuration: %s", exc)
        _show_error(
            f"Configuration Error:\n\n{exc}\n\n"
            "Please check your ~/.config/ostt/ostt.toml file and try again."
        )
        raise ConfigError(f"Configuration error: {exc}") from exc

    audio = config.audio
    logger.info(
        "Configuration loaded: device=%s, sample_rate=%sHz, peak_threshold=%s%%, "
        "reference_level=%sdBFS",
        audio.device,
        audio.sample_rate,
        audio.peak_volume_threshold,
        audio.reference_level_db,
    )

    recorder = AudioRecorder(audio.sample_rate, audio.device)
    try:
        recorder.start_recording()
    except Exception as exc:
        logger.error("Failed to start recording: %s", exc)
        _show_error(
            f"Recording Error:\n\n{exc}\n\nPlease check your audio configuration and try again."
        )
        raise

    tui = OsttTui(recorder.sample_rate(), audio.peak_volume_threshold, audio.reference_level_db)
    triggered = threading.Event()
    previous_handler = _install_trigger(triggered)

    try:
        logger.info(
            "Entering recording loop. Press 'Enter' to transcribe or 'Escape'/'q' to cancel."
        )
        should_transcribe = _record_loop(tui, recorder, triggered)

        logger.info("Stopping recording and saving audio...")
        extension = extension_for_format(audio.output_format)
        filepath = Path(tempfile.gettempdir()) / f"{RECORDING_BASENAME}.{extension}"
        try:
            recorder.stop_recording(filepath, audio.output_format)
        except Exception as exc:
            logger.error("Failed to save recording: %s", exc)
            raise

        if should_transcribe:
            try:
                model_id = credentials.get_selected_model(
                    secrets_dir=credentials.default_secrets_dir()
                )
            except Exception:
                model_id = None
            if model_id:
                try:
                    transcribe_recording_with_animation(tui, config, model_id, filepath)
                except _ReportedError as exc:
                    logger.warning("Transcription failed: %s", exc)
                    tui.cleanup()
                    _show_error(exc.screen_message)
                    print(f"Warning: Transcription failed: {exc}", file=sys.stderr)
                except Exception as exc:
                    logger.warning("Transcription failed: %s", exc)
                    print(f"Warning: Transcription failed: {exc}", file=sys.stderr)
            else:
                logger.warning("No transcription model configured")
                tui.cleanup()
                _show_error(
                    "Error: No transcription model configured.\n\n"
                    "Please run 'ostt auth' to select a model."
                )
        else:
            logger.info("User canceled recording, no transcription performed")
    finally:
        tui.cleanup()
        if previous_handler is not None:
            signal.signal(signal.SIGUSR1, previous_handler)

    logger.info("=== ostt Audio Recorder Exited Successfully ===")