"""Loading, saving and editing the application configuration file."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

__all__ = [
    "ConfigError",
    "AudioConfig",
    "DeepgramConfig",
    "OpenAiConfig",
    "ProvidersConfig",
    "OsttConfig",
    "config_path",
    "save_config",
    "find_editor",
    "edit_config",
]

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "mp3 -ab 16k -ar 12000"
DEFAULT_PEAK_VOLUME_THRESHOLD = 90
DEFAULT_REFERENCE_LEVEL_DB = -20
DEFAULT_UTT_SPLIT = 0.8


class ConfigError(Exception):
    """Raised when the configuration cannot be read, parsed or edited."""


@dataclass
class AudioConfig:
    """Audio recording and processing settings."""

    device: str
    sample_rate: int
    peak_volume_threshold: int = DEFAULT_PEAK_VOLUME_THRESHOLD
    reference_level_db: int = DEFAULT_REFERENCE_LEVEL_DB
    output_format: str = DEFAULT_OUTPUT_FORMAT


@dataclass
class DeepgramConfig:
    """Deepgram feature flags."""

    filler_words: bool = False
    measurements: bool = False
    numerals: bool = False
    paragraphs: bool = False
    profanity_filter: bool = False
    punctuate: bool = False
    smart_format: bool = False
    utterances: bool = False
    utt_split: float = DEFAULT_UTT_SPLIT
    mip_opt_out: bool = False


@dataclass
class OpenAiConfig:
    """OpenAI settings; none are configurable yet."""


@dataclass
class ProvidersConfig:
    """Settings for every provider."""

    deepgram: DeepgramConfig = field(default_factory=DeepgramConfig)
    openai: OpenAiConfig = field(default_factory=OpenAiConfig)


def _table(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"invalid type for '{where}': expected a table")
    return data


def _string(table: dict[str, Any], key: str, where: str, default: str | None = None) -> str:
    if key not in table:
        if default is None:
            raise ConfigError(f"missing field '{key}' in '{where}'")
        return default
    value = table[key]
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for '{where}.{key}': expected a string")
    return value


def _integer(
    table: dict[str, Any],
    key: str,
    where: str,
    low: int,
    high: int,
    default: int | None = None,
) -> int:
    if key not in table:
        if default is None:
            raise ConfigError(f"missing field '{key}' in '{where}'")
        return default
    value = table[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"invalid type for '{where}.{key}': expected an integer")
    if not low <= value <= high:
        raise ConfigError(f"invalid value for '{where}.{key}': {value} is out of range {low}..{high}")
    return value


def _boolean(table: dict[str, Any], key: str, where: str) -> bool:
    value = table.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"invalid type for '{where}.{key}': expected a boolean")
    return value


def _number(table: dict[str, Any], key: str, where: str, default: float) -> float:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"invalid type for '{where}.{key}': expected a number")
    return float(value)


def _audio_from_dict(data: Any) -> AudioConfig:
    table = _table(data, "audio")
    return AudioConfig(
        device=_string(table, "device", "audio"),
        sample_rate=_integer(table, "sample_rate", "audio", 0, 2**32 - 1),
        peak_volume_threshold=_integer(
            table, "peak_volume_threshold", "audio", 0, 255, DEFAULT_PEAK_VOLUME_THRESHOLD
        ),
        reference_level_db=_integer(
            table, "reference_level_db", "audio", -128, 127, DEFAULT_REFERENCE_LEVEL_DB
        ),
        output_format=_string(table, "output_format", "audio", DEFAULT_OUTPUT_FORMAT),
    )


def _deepgram_from_dict(data: Any) -> DeepgramConfig:
    where = "providers.deepgram"
    table = _table(data, where)
    flags = {
        name: _boolean(table, name, where)
        for name in (
            "filler_words",
            "measurements",
            "numerals",
            "paragraphs",
            "profanity_filter",
            "punctuate",
            "smart_format",
            "utterances",
            "mip_opt_out",
        )
    }
    return DeepgramConfig(utt_split=_number(table, "utt_split", where, DEFAULT_UTT_SPLIT), **flags)


def _providers_from_dict(data: Any) -> ProvidersConfig:
    table = _table(data, "providers")
    deepgram = _deepgram_from_dict(table["deepgram"]) if "deepgram" in table else DeepgramConfig()
    if "openai" in table:
        _table(table["openai"], "providers.openai")
    return ProvidersConfig(deepgram=deepgram, openai=OpenAiConfig())


@dataclass
class OsttConfig:
    """The complete application configuration."""

    audio: AudioConfig
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OsttConfig:
        """Build a configuration from parsed TOML data, validating every field."""
        root = _table(data, "root")
        if "audio" not in root:
            raise ConfigError("missing field 'audio'")
        audio = _audio_from_dict(root["audio"])
        providers = _providers_from_dict(root["providers"]) if "providers" in root else ProvidersConfig()
        return cls(audio=audio, providers=providers)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as plain data suitable for TOML."""
        return asdict(self)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> OsttConfig:
        """Read and parse the configuration file."""
        target = Path(path) if path is not None else config_path()
        try:
            content = target.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read {target}: {exc}") from exc
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Malformed TOML in {target}: {exc}") from exc
        return cls.from_dict(data)

    def save(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write the configuration to disk as TOML."""
        target = Path(path) if path is not None else config_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(tomli_w.dumps(self.to_dict()), encoding="utf-8")
        logger.info("Configuration saved")


def config_path() -> Path:
    """Return the path of the configuration file, creating its directory."""
    config_dir = Path.home() / ".config" / "ostt"
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Failed to create config directory: {exc}") from exc
    return config_dir / "ostt.toml"


def save_config(config: OsttConfig, path: str | os.PathLike[str] | None = None) -> None:
    """Save the configuration to the given path or the default location."""
    config.save(path)


def find_editor() -> str:
    """Pick an editor: $EDITOR, then nano, then vi."""
    editor = os.environ.get("EDITOR", "")
    if editor:
        return editor
    for candidate in ("nano", "vi"):
        if shutil.which(candidate):
            return candidate
    raise ConfigError("No editor found. Please set the $EDITOR environment variable.")


def edit_config(path: str | os.PathLike[str] | None = None) -> None:
    """Open the configuration file in the user's editor and wait for it to exit."""
    target = Path(path) if path is not None else config_path()
    logger.info("Opening config file: %s", target)
    editor = find_editor()
    logger.info("Using editor: %s", editor)
    try:
        result = subprocess.run([editor, str(target)], check=False)
    except OSError as exc:
        raise ConfigError(
            f"Failed to open editor '{editor}': {exc}. "
            "Make sure the editor is installed and accessible."
        ) from exc
    if result.returncode != 0:
        raise ConfigError(f"Editor exited with error code: {result.returncode}")
    logger.info("Config file edited successfully")