"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/activity_log.py
Append-only, session-scoped activity log with filtering and plain-text export.
Appends are serialized with a lock so insertion order stays chronological
when several workers report at once.
"""

import threading
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from filededup.core.models import LogEntry, LogType

HASH_PREVIEW_LENGTH = 12


def format_timestamp(timestamp: str) -> str:
    """ISO-8601 timestamp rendered in the local timezone."""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_entry(entry: LogEntry) -> str:
    """`[time] TYPE: message | File: path | Hash: 0123456789ab...`"""
    line = f"[{format_timestamp(entry.timestamp)}] {entry.type.value}: {entry.message}"
    if entry.file_path:
        line += f" | File: {entry.file_path}"
    if entry.hash:
        line += f" | Hash: {entry.hash[:HASH_PREVIEW_LENGTH]}..."
    return line


def export_entries(entries: Iterable[LogEntry]) -> str:
    return "\n".join(format_entry(entry) for entry in entries)


class ActivityLog:
    """
    Ordered record of SCAN / DUPLICATE / CATEGORY / DELETE events.
    Entries are never reordered or removed, except by clear().
    """

    def __init__(self, entries: Optional[Iterable[LogEntry]] = None):
        self._lock = threading.Lock()
        self._entries: List[LogEntry] = list(entries or [])

    def append(self, entry: LogEntry) -> LogEntry:
        with self._lock:
            self._entries.append(entry)
        return entry

    def extend(self, entries: Iterable[LogEntry]) -> None:
        entries = list(entries)
        with self._lock:
            self._entries.extend(entries)

    def record(
            self,
            log_type: LogType,
            message: str,
            file_path: Optional[str] = None,
            hash: Optional[str] = None
    ) -> LogEntry:
        """Creates a timestamped entry and appends it."""
        # Timestamp under the lock so append order equals timestamp order
        with self._lock:
            entry = LogEntry.create(log_type, message, file_path, hash)
            self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def filter(
            self,
            log_type: Optional[LogType] = None,
            search: Optional[str] = None
    ) -> Iterator[LogEntry]:
        """
        Lazily yields entries of `log_type` (all types if None) whose message or
        file path contains `search`, case-insensitive.
        """
        needle = search.lower() if search else None
        for entry in self.entries:
            if log_type is not None and entry.type != LogType(log_type):
                continue
            if needle is not None:
                in_message = needle in entry.message.lower()
                in_path = entry.file_path is not None and needle in entry.file_path.lower()
                if not (in_message or in_path):
                    continue
            yield entry

    def recent(self, limit: int, log_type: Optional[LogType] = None) -> List[LogEntry]:
        """Last `limit` entries, optionally of one type."""
        if limit <= 0:
            return []
        return list(self.filter(log_type=log_type))[-limit:]

    def count_by_type(self) -> Dict[LogType, int]:
        counts = Counter(entry.type for entry in self.entries)
        return {log_type: counts.get(log_type, 0) for log_type in LogType.get_all()}

    def export(self) -> str:
        """All entries as text, one line per entry, in append order."""
        return export_entries(self.entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.entries)


class EntryCollector:
    """
    Records into a shared ActivityLog and keeps the entries it created itself.
    Other writers and clear() on the shared log do not affect `entries`.
    """

    def __init__(self, log: ActivityLog):
        self.log = log
        self.entries: List[LogEntry] = []

    def record(
            self,
            log_type: LogType,
            message: str,
            file_path: Optional[str] = None,
            hash: Optional[str] = None
    ) -> LogEntry:
        entry = self.log.record(log_type, message, file_path, hash)
        self.entries.append(entry)
        return entry
