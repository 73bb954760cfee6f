"""Sending recorded audio to a transcription provider."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

import httpx

from ostt.config import DEFAULT_UTT_SPLIT, ProvidersConfig
from ostt.providers import TranscriptionModel, TranscriptionProvider

__all__ = [
    "TranscriptionError",
    "TranscriptionConfig",
    "build_deepgram_url",
    "transcribe_openai",
    "transcribe_deepgram",
    "transcribe",
]

logger = logging.getLogger(__name__)

PathArg = str | os.PathLike[str]


class TranscriptionError(Exception):
    """Raised when an audio file could not be transcribed."""


@dataclass
class TranscriptionConfig:
    """Everything needed for one transcription request."""

    model: TranscriptionModel
    api_key: str
    keywords: list[str] = field(default_factory=list)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def build_deepgram_url(config: TranscriptionConfig) -> str:
    """Build the Deepgram request URL with model, feature flags and keywords."""
    url = f"{config.model.endpoint()}?model={config.model.api_model_name()}"
    deepgram = config.providers.deepgram
    flags = (
        ("filler_words", deepgram.filler_words),
        ("measurements", deepgram.measurements),
        ("numerals", deepgram.numerals),
        ("paragraphs", deepgram.paragraphs),
        ("profanity_filter", deepgram.profanity_filter),
        ("punctuate", deepgram.punctuate),
        ("smart_format", deepgram.smart_format),
        ("utterances", deepgram.utterances),
    )
    url += "".join(f"&{name}=true" for name, enabled in flags if enabled)
    if deepgram.utt_split != DEFAULT_UTT_SPLIT:
        url += f"&utt_split={_format_number(deepgram.utt_split)}"
    if deepgram.mip_opt_out:
        url += "&mip_opt_out=true"

    if config.keywords:
        param = "keyterm" if config.model is TranscriptionModel.DEEPGRAM_NOVA_3 else "keywords"
        url += "".join(f"&{param}={quote(keyword, safe='')}" for keyword in config.keywords)
    return url


def _read_audio(audio_path: PathArg) -> bytes:
    try:
        return Path(audio_path).read_bytes()
    except OSError as exc:
        raise TranscriptionError(f"Failed to read audio file: {exc}") from exc


def _network_error(name: str, exc: Exception) -> TranscriptionError:
    if isinstance(exc, httpx.ConnectError):
        message = f"Failed to connect to {name} API server. Check your internet connection."
    elif isinstance(exc, httpx.TimeoutException):
        message = f"Request to {name} timed out. The API server is not responding."
    elif isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        message = f"Failed to build {name} API request: {exc}. This may be a configuration error."
    else:
        message = f"{name} network error: {exc}"
    return TranscriptionError(message)


def _check_status(name: str, response: httpx.Response) -> None:
    if response.is_success:
        return
    code = response.status_code
    if code == 401:
        message = (
            f"{name} API key is invalid or expired. "
            "Please run 'ostt auth' to update your API key."
        )
    elif code == 403:
        message = (
            f"You don't have permission to use {name}'s API. "
            "Check your API key and account status."
        )
    elif code == 429:
        message = (
            f"Too many requests to {name}. You've hit the API rate limit. "
            "Please wait and try again."
        )
    elif code in (500, 502, 503, 504):
        message = f"{name} API server is experiencing issues. Please try again later."
    else:
        try:
            body = response.text
        except UnicodeDecodeError:
            body = "Unknown error"
        message = f"{name} API error (status {code} {response.reason_phrase}): {body}"
    raise TranscriptionError(message)


def _post(name: str, url: str, **kwargs) -> httpx.Response:
    try:
        with httpx.Client(timeout=None) as client:
            return client.post(url, **kwargs)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise _network_error(name, exc) from exc


def transcribe_openai(config: TranscriptionConfig, audio_path: PathArg) -> str:
    """Transcribe with OpenAI, sending keywords as a prompt where the model supports it."""
    audio_data = _read_audio(audio_path)
    model_name = config.model.api_model_name()
    data = {"model": model_name}

    if config.keywords:
        if model_name == "gpt-4o-transcribe":
            logger.debug(
                "Keywords defined but %s does not support prompt parameter. Keywords: %s",
                model_name,
                config.keywords,
            )
        else:
            data["prompt"] = ", ".join(config.keywords)
            logger.debug("Keywords used as prompt for OpenAI model: %s", config.keywords)

    url = f"{config.model.endpoint()}?response_format=json"
    logger.debug("OpenAI API call: POST %s with parameters %s", url, data)

    response = _post(
        "OpenAI",
        url,
        headers={"Authorization": f"Bearer {config.api_key}"},
        data=data,
        files={"file": (Path(audio_path).name, audio_data, "audio/mpeg")},
    )
    _check_status("OpenAI", response)

    try:
        payload = response.json()
        text = payload["text"]
        if not isinstance(text, str):
            raise TypeError("'text' is not a string")
    except (ValueError, KeyError, TypeError) as exc:
        raise TranscriptionError(f"Failed to parse OpenAI response: {exc}") from exc

    logger.debug("OpenAI transcription length: %d characters", len(text))
    return text


def transcribe_deepgram(config: TranscriptionConfig, audio_path: PathArg) -> str:
    """Transcribe with Deepgram by posting the raw audio bytes."""
    audio_data = _read_audio(audio_path)
    url = build_deepgram_url(config)

    response = _post(
        "Deepgram",
        url,
        headers={
            "Authorization": f"Token {config.api_key}",
            "Content-Type": "audio/mpeg",
        },
        content=audio_data,
    )
    _check_status("Deepgram", response)

    try:
        payload = response.json()
        channels = payload["results"]["channels"]
        if not isinstance(channels, list):
            raise TypeError("'channels' is not a list")
        alternatives = [channel["alternatives"] for channel in channels]
        transcripts = [[alt["transcript"] for alt in alts] for alts in alternatives]
    except (ValueError, KeyError, TypeError) as exc:
        raise TranscriptionError(f"Failed to parse Deepgram response: {exc}") from exc

    if not transcripts or not transcripts[0]:
        raise TranscriptionError("No transcript found in Deepgram response")
    transcript = transcripts[0][0]
    if not isinstance(transcript, str):
        raise TranscriptionError("Failed to parse Deepgram response: transcript is not a string")
    return transcript


def transcribe(config: TranscriptionConfig, audio_path: PathArg) -> str:
    """Transcribe an audio file with whichever provider serves the configured model."""
    provider = config.model.provider()
    logger.info(
        "Starting transcription using model: %s (provider: %s) from file: %s",
        config.model.id(),
        provider.display_name(),
        audio_path,
    )
    if provider is TranscriptionProvider.OPENAI:
        text = transcribe_openai(config, audio_path)
    else:
        text = transcribe_deepgram(config, audio_path)
    logger.info("Transcription completed successfully")
    return text