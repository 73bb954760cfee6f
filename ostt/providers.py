"""Supported transcription providers and models."""

from __future__ import annotations

from enum import Enum

__all__ = ["TranscriptionProvider", "TranscriptionModel"]


class TranscriptionProvider(Enum):
    """A transcription service provider."""

    OPENAI = "openai"
    DEEPGRAM = "deepgram"

    def id(self) -> str:
        """Return the provider identifier used in credentials and config."""
        return self.value

    def display_name(self) -> str:
        """Return the human-readable provider name."""
        return _PROVIDER_NAMES[self]

    @classmethod
    def from_id(cls, provider_id: str) -> TranscriptionProvider | None:
        """Look up a provider by identifier, or return None if unknown."""
        try:
            return cls(provider_id)
        except ValueError:
            return None


class TranscriptionModel(Enum):
    """A transcription model offered by one of the providers."""

    GPT_4O_TRANSCRIBE = "gpt-4o-transcribe"
    GPT_4O_MINI_TRANSCRIBE = "gpt-4o-mini-transcribe"
    WHISPER = "whisper"
    DEEPGRAM_NOVA_3 = "nova-3"
    DEEPGRAM_NOVA_2 = "nova-2"

    def provider(self) -> TranscriptionProvider:
        """Return the provider that serves this model."""
        return _MODEL_INFO[self][0]

    def id(self) -> str:
        """Return the model identifier."""
        return self.value

    def description(self) -> str:
        """Return a human-readable description of the model."""
        return _MODEL_INFO[self][1]

    def endpoint(self) -> str:
        """Return the API endpoint used for this model."""
        return _ENDPOINTS[self.provider()]

    def api_model_name(self) -> str:
        """Return the model name sent to the provider's API."""
        return _MODEL_INFO[self][2]

    @classmethod
    def from_id(cls, model_id: str) -> TranscriptionModel | None:
        """Look up a model by identifier, or return None if unknown."""
        try:
            return cls(model_id)
        except ValueError:
            return None

    @classmethod
    def available_ids(cls) -> list[str]:
        """Return the identifiers of all models, in display order."""
        return [model.id() for model in cls]

    @classmethod
    def models_for_provider(cls, provider: TranscriptionProvider) -> list[TranscriptionModel]:
        """Return every model served by the given provider."""
        return [model for model in cls if model.provider() is provider]


_PROVIDER_NAMES = {
    TranscriptionProvider.OPENAI: "OpenAI",
    TranscriptionProvider.DEEPGRAM: "Deepgram",
}

_ENDPOINTS = {
    TranscriptionProvider.OPENAI: "https://api.openai.com/v1/audio/transcriptions",
    TranscriptionProvider.DEEPGRAM: "https://api.deepgram.com/v1/listen",
}

_MODEL_INFO = {
    TranscriptionModel.GPT_4O_TRANSCRIBE: (
        TranscriptionProvider.OPENAI,
        "GPT-4o Transcribe (latest, best accuracy)",
        "gpt-4o-transcribe",
    ),
    TranscriptionModel.GPT_4O_MINI_TRANSCRIBE: (
        TranscriptionProvider.OPENAI,
        "GPT-4o Mini Transcribe (faster, lighter)",
        "gpt-4o-mini-transcribe",
    ),
    TranscriptionModel.WHISPER: (
        TranscriptionProvider.OPENAI,
        "Whisper (legacy)",
        "whisper-1",
    ),
    TranscriptionModel.DEEPGRAM_NOVA_3: (
        TranscriptionProvider.DEEPGRAM,
        "Nova 3 (latest, fastest)",
        "nova-3",
    ),
    TranscriptionModel.DEEPGRAM_NOVA_2: (
        TranscriptionProvider.DEEPGRAM,
        "Nova 2 (previous generation)",
        "nova-2",
    ),
}