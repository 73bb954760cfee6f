"""Storage of keywords used to improve transcription accuracy."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = ["KeywordsManager"]


class KeywordsManager:
    """Manages the keywords list kept in keywords.txt in the config directory."""

    def __init__(self, config_dir: str | os.PathLike[str]) -> None:
        self.file_path = Path(config_dir) / "keywords.txt"

    def load_keywords(self) -> list[str]:
        """Return the stored keywords, trimmed, skipping blank lines."""
        if not self.file_path.exists():
            return []
        content = self.file_path.read_text(encoding="utf-8")
        return [line.strip() for line in content.splitlines() if line.strip()]

    def save_keywords(self, keywords: list[str]) -> None:
        """Write the keywords, one per line."""
        self.file_path.write_text("\n".join(keywords), encoding="utf-8")

    def add_keyword(self, keyword: str) -> None:
        """Append a keyword unless it is already present."""
        keywords = self.load_keywords()
        if keyword not in keywords:
            keywords.append(keyword)
            self.save_keywords(keywords)

    def remove_keyword(self, index: int) -> None:
        """Remove the keyword at the given position; out-of-range indices are ignored."""
        keywords = self.load_keywords()
        if 0 <= index < len(keywords):
            del keywords[index]
            self.save_keywords(keywords)