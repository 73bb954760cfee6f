"""Storage of API keys and the selected model with restricted permissions."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

import tomli_w

__all__ = [
    "default_secrets_dir",
    "save_api_key",
    "get_api_key",
    "get_authorized_providers",
    "clear_api_key",
    "save_selected_model",
    "get_selected_model",
]

logger = logging.getLogger(__name__)

_CREDENTIALS_FILE = "credentials"
_MODEL_FILE = "model"

PathArg = str | os.PathLike[str] | None


def default_secrets_dir() -> Path:
    """Return ~/.local/share/ostt, creating it if needed."""
    secrets_dir = Path.home() / ".local" / "share" / "ostt"
    secrets_dir.mkdir(parents=True, exist_ok=True)
    return secrets_dir


def _resolve(secrets_dir: PathArg) -> Path:
    if secrets_dir is None:
        return default_secrets_dir()
    path = Path(secrets_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _restrict(path: Path) -> None:
    if os.name == "posix":
        path.chmod(0o600)


def _read_credentials(credentials_file: Path) -> dict[str, str]:
    """Read the credentials map; an unparseable file counts as empty."""
    content = credentials_file.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return {}
    if not all(isinstance(value, str) for value in data.values()):
        return {}
    return data


def _write_credentials(credentials_file: Path, credentials: dict[str, str]) -> None:
    credentials_file.write_text(tomli_w.dumps(credentials), encoding="utf-8")


def save_api_key(provider_id: str, api_key: str, secrets_dir: PathArg = None) -> None:
    """Store the API key for a provider, keeping other providers' keys."""
    credentials_file = _resolve(secrets_dir) / _CREDENTIALS_FILE
    credentials = _read_credentials(credentials_file) if credentials_file.exists() else {}
    credentials[provider_id] = api_key
    _write_credentials(credentials_file, credentials)
    _restrict(credentials_file)
    logger.info("API key saved for provider: %s", provider_id)


def get_api_key(provider_id: str, secrets_dir: PathArg = None) -> str | None:
    """Return the stored API key for a provider, or None."""
    credentials_file = _resolve(secrets_dir) / _CREDENTIALS_FILE
    if not credentials_file.exists():
        return None
    return _read_credentials(credentials_file).get(provider_id)


def get_authorized_providers(secrets_dir: PathArg = None) -> list[str]:
    """Return the identifiers of all providers with a stored API key."""
    credentials_file = _resolve(secrets_dir) / _CREDENTIALS_FILE
    if not credentials_file.exists():
        return []
    return list(_read_credentials(credentials_file))


def clear_api_key(provider_id: str, secrets_dir: PathArg = None) -> None:
    """Remove the stored API key for a provider, if any."""
    credentials_file = _resolve(secrets_dir) / _CREDENTIALS_FILE
    if not credentials_file.exists():
        return
    credentials = _read_credentials(credentials_file)
    if credentials.pop(provider_id, None) is not None:
        _write_credentials(credentials_file, credentials)
        logger.info("API key cleared for provider: %s", provider_id)


def save_selected_model(provider_id: str, model_id: str, secrets_dir: PathArg = None) -> None:
    """Store the globally selected model; only the model id is kept."""
    del provider_id  # the provider follows from the model id
    model_file = _resolve(secrets_dir) / _MODEL_FILE
    model_file.write_text(model_id, encoding="utf-8")
    _restrict(model_file)
    logger.info("Model selected: %s", model_id)


def get_selected_model(secrets_dir: PathArg = None) -> str | None:
    """Return the selected model id, or None if none is stored."""
    model_file = _resolve(secrets_dir) / _MODEL_FILE
    if not model_file.exists():
        return None
    model_id = model_file.read_text(encoding="utf-8").strip()
    return model_id or None