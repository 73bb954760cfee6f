"""Choosing a transcription provider and model and storing its API key."""

from __future__ import annotations

import getpass
import logging

from ostt import credentials
from ostt.providers import TranscriptionModel, TranscriptionProvider

__all__ = ["provider_model_options", "resolve_api_key", "handle_auth"]

logger = logging.getLogger(__name__)

LOGO = "\n ┏┓┏╋╋ \n ┗┛┛┗┗ \n"


def provider_model_options() -> list[tuple[TranscriptionProvider, TranscriptionModel]]:
    """Return every provider/model combination, grouped by provider."""
    return [
        (provider, model)
        for provider in TranscriptionProvider
        for model in TranscriptionModel.models_for_provider(provider)
    ]


def resolve_api_key(entered: str, current: str | None) -> str:
    """Return the key to store: the entered one, or the current one if nothing was entered."""
    if entered:
        return entered
    if current is not None:
        return current
    raise ValueError("API key cannot be empty")


def _choose(options: list[str]) -> int:
    print("Select provider and model:")
    for number, option in enumerate(options, start=1):
        print(f"  {number}) {option}")
    while True:
        try:
            answer = input(f"Choice [1-{len(options)}]: ").strip()
        except (EOFError, KeyboardInterrupt) as exc:
            raise RuntimeError(f"Selection cancelled: {exc!r}") from exc
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        print(f"Please enter a number between 1 and {len(options)}.")


def handle_auth() -> tuple[TranscriptionProvider, TranscriptionModel]:
    """Let the user pick a provider and model, store the API key and selection."""
    logger.info("=== ostt Authentication ===")
    print(LOGO)
    print(" auth ")

    secrets_dir = credentials.default_secrets_dir()
    try:
        current_model = credentials.get_selected_model(secrets_dir=secrets_dir)
    except Exception:
        current_model = None
    if current_model:
        print(f"current model: {current_model}")

    options = provider_model_options()
    if not options:
        raise RuntimeError("No provider/model combinations available")

    labels = [f"{provider.display_name()} / {model.description()}" for provider, model in options]
    provider, model = options[_choose(labels)]

    try:
        current_key = credentials.get_api_key(provider.id(), secrets_dir=secrets_dir)
    except Exception:
        current_key = None

    if current_key is not None:
        prompt = f"Enter API key for {provider.display_name()} (press Enter to keep current): "
    else:
        prompt = f"Enter API key for {provider.display_name()}: "
    try:
        entered = getpass.getpass(prompt)
    except (EOFError, KeyboardInterrupt) as exc:
        raise RuntimeError(f"API key input cancelled: {exc!r}") from exc

    api_key = resolve_api_key(entered.strip(), current_key)
    credentials.save_api_key(provider.id(), api_key, secrets_dir=secrets_dir)
    credentials.save_selected_model(provider.id(), model.id(), secrets_dir=secrets_dir)

    print("✅ Configuration saved.")
    logger.info("Authentication completed: provider=%s, model=%s", provider.id(), model.id())
    return provider, model