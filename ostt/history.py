"""Persistent transcription history backed by SQLite."""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = ["TranscriptionEntry", "HistoryManager"]

logger = logging.getLogger(__name__)

DATABASE_FILE = "transcription_history.db"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS transcriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


@dataclass(frozen=True)
class TranscriptionEntry:
    """A single stored transcription."""

    id: int
    text: str
    created_at: datetime


def _entry_from_row(row: tuple[int, str, str]) -> TranscriptionEntry:
    entry_id, text, timestamp = row
    try:
        created_at = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid timestamp format: {timestamp!r}") from exc
    if created_at.tzinfo is None:
        raise ValueError(f"Invalid timestamp format: {timestamp!r}")
    return TranscriptionEntry(id=entry_id, text=text, created_at=created_at.astimezone())


class HistoryManager:
    """Stores and retrieves transcriptions in a database in the data directory."""

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self.database_path = Path(data_dir) / DATABASE_FILE
        self._connection: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        """Open the database on first use and make sure the table exists."""
        if self._connection is None:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.database_path)
            connection.execute("PRAGMA foreign_keys = ON")
            connection.execute(_CREATE_TABLE)
            connection.commit()
            self._connection = connection
        return self._connection

    def save_transcription(self, text: str) -> None:
        """Store a new transcription stamped with the current local time."""
        connection = self._connect()
        timestamp = datetime.now().astimezone().isoformat()
        with connection:
            connection.execute(
                "INSERT INTO transcriptions (text, created_at) VALUES (?, ?)",
                (text, timestamp),
            )
        logger.info("Transcription saved to history")

    def get_all_transcriptions(self) -> list[TranscriptionEntry]:
        """Return every transcription, most recent first."""
        rows = self._connect().execute(
            "SELECT id, text, created_at FROM transcriptions ORDER BY created_at DESC"
        )
        return [_entry_from_row(row) for row in rows]

    def get_transcription(self, entry_id: int) -> TranscriptionEntry | None:
        """Return the transcription with the given id, or None."""
        row = (
            self._connect()
            .execute("SELECT id, text, created_at FROM transcriptions WHERE id = ?", (entry_id,))
            .fetchone()
        )
        return _entry_from_row(row) if row is not None else None

    def close(self) -> None:
        """Close the database connection if it is open."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> HistoryManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()