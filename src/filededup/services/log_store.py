"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/log_store.py
JSON file persistence for activity log entries.
"""
import json
import logging
from pathlib import Path
from typing import Iterable, List

from filededup.core.models import LogEntry

logger = logging.getLogger(__name__)


class LogStore:
    """
    Stores log entries as a JSON list of {timestamp, type, message, filePath, hash}.
    A missing file is an empty store.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> List[LogEntry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [LogEntry.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise RuntimeError(f"Failed to load log store {self.path}: {e}") from e

    def save(self, entries: Iterable[LogEntry]) -> None:
        payload = [entry.to_dict() for entry in entries]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            raise RuntimeError(f"Failed to save log store {self.path}: {e}") from e
        logger.debug(f"Saved {len(payload)} log entries to {self.path}")

    def append(self, entries: Iterable[LogEntry]) -> List[LogEntry]:
        """Adds entries after the stored ones and returns the full list."""
        combined = self.load() + list(entries)
        self.save(combined)
        return combined
