"""Command-line entry point: parses the command and runs its handler."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["Command", "HELP_TEXT", "parse_command", "run", "main"]

logger = logging.getLogger(__name__)

HELP_TEXT = """
┏┓┏╋╋
┗┛┛┗┗

A terminal-based speech-to-text recorder with real-time waveform visualization
and automatic transcription support.

USAGE:
    ostt [COMMAND]

COMMANDS:
    record              Record audio with real-time volume metering
                        Press Enter to transcribe, Escape/q to cancel

    auth                Authenticate with a transcription provider and
                        select a model. Handles both provider selection
                        and API key management in one unified flow.

    history             View and browse your transcription history
                        Select a transcription to copy it to clipboard

    keywords            Manage keywords for improved transcription accuracy
                        Add, remove, and view keywords used by AI models

    config              Open configuration file in your preferred editor
                        Customize audio settings and provider options

    version, -V, --version
                        Show version information

    list-devices        List available audio input devices

    logs                Show recent log entries from the application

    help, -h, --help    Show this help message

EXAMPLES:
    # Record audio
    $ ostt record

    # Set up authentication and select a model
    $ ostt auth

    # View your transcription history
    $ ostt history

    # Edit configuration file
    $ ostt config

CONFIGURATION:
    Config file:        ~/.config/ostt/ostt.toml
    Logs:               ~/.local/state/ostt/ostt.log.*
"""


class Command(Enum):
    """The commands the program understands."""

    RECORD = "record"
    AUTH = "auth"
    HISTORY = "history"
    KEYWORDS = "keywords"
    CONFIG = "config"
    HELP = "help"
    VERSION = "version"
    LIST_DEVICES = "list-devices"
    LOGS = "logs"
    INVALID = "invalid"


_ALIASES = {
    "record": Command.RECORD,
    "auth": Command.AUTH,
    "history": Command.HISTORY,
    "keywords": Command.KEYWORDS,
    "config": Command.CONFIG,
    "help": Command.HELP,
    "-h": Command.HELP,
    "--help": Command.HELP,
    "version": Command.VERSION,
    "-V": Command.VERSION,
    "--version": Command.VERSION,
    "list-devices": Command.LIST_DEVICES,
    "logs": Command.LOGS,
}


def parse_command(argv: Sequence[str]) -> Command:
    """Map the first argument to a command; no argument means record."""
    if not argv:
        return Command.RECORD
    return _ALIASES.get(argv[0], Command.INVALID)


def _version() -> str:
    try:
        return version("ostt")
    except PackageNotFoundError:
        return "0.0.2"


def _ensure_config(path: Path) -> None:
    """Write a default configuration on first run."""
    from ostt.config import OsttConfig

    logger.info("Configuration file not found, running setup...")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        default = OsttConfig.from_dict({"audio": {"device": "default", "sample_rate": 16000}})
        default.save(path)
    except Exception as exc:
        logger.error("Setup failed: %s", exc)
        raise RuntimeError(f"Setup failed: {exc}") from exc
    logger.info("Setup completed successfully")


def _handle_keywords() -> None:
    """Line-based keyword manager: list, add and remove keywords."""
    from ostt.keywords import KeywordsManager

    config_dir = Path.home() / ".config" / "ostt"
    config_dir.mkdir(parents=True, exist_ok=True)
    manager = KeywordsManager(config_dir)
    while True:
        keywords = manager.load_keywords()
        print("\n Keywords ")
        for number, keyword in enumerate(keywords, start=1):
            print(f"  {number}) {keyword}")
        if not keywords:
            print("  (none)")
        print("a <keyword> add, x <number> remove, q quit")
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        action, _, argument = line.partition(" ")
        argument = argument.strip()
        if action == "q":
            break
        if action == "a" and argument:
            manager.add_keyword(argument)
        elif action == "x" and argument.isdigit():
            manager.remove_keyword(int(argument) - 1)


def run(argv: Sequence[str] | None = None) -> int:
    """Run the command named by the arguments and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    command = parse_command(args)

    if command is Command.HELP:
        print(HELP_TEXT)
        return 0
    if command is Command.VERSION:
        print(f"ostt {_version()}")
        return 0
    if command is Command.LIST_DEVICES:
        from ostt.devices import handle_list_devices

        try:
            handle_list_devices()
        except Exception as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0
    if command is Command.LOGS:
        from ostt.logs import handle_logs

        try:
            handle_logs()
        except Exception as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0
    if command is Command.INVALID:
        print(f"Error: unknown command '{args[0]}'", file=sys.stderr)
        print("Run 'ostt help' to see available commands.", file=sys.stderr)
        return 2

    from ostt.config import config_path, edit_config
    from ostt.logsetup import init_logging

    init_logging()
    path = Path(config_path())
    if not path.exists():
        _ensure_config(path)

    if command is Command.AUTH:
        from ostt.auth import handle_auth

        handle_auth()
    elif command is Command.RECORD:
        from ostt.record import handle_record

        handle_record()
    elif command is Command.HISTORY:
        from ostt.history_ui import handle_history

        handle_history()
    elif command is Command.KEYWORDS:
        _handle_keywords()
    elif command is Command.CONFIG:
        edit_config(path)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ostt command; reports errors and returns the exit status."""
    try:
        return run(argv)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1