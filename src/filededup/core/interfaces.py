"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the scan pipeline.
These protocols keep the pipeline stages swappable and easy to fake in tests.

Key Components:
---------------
- HashAlgorithm: Incremental hash function producing a hex digest (SHA-256 by default).
- Fingerprinter: Computes a content digest for a file source.
- FileGrouper: Partitions fingerprinted files into duplicate groups.
- Categorizer: Assigns every file exactly one category from an ordered rule set.
- LogRecorder: Anything that turns events into activity log entries.
"""

from typing import Protocol, List, Dict, Optional, Callable
from filededup.core.models import FileSource, FileRecord, DuplicateGroup, LogEntry, LogType


class LogRecorder(Protocol):
    """Interface for appending timestamped activity log entries."""

    def record(
        self,
        log_type: LogType,
        message: str,
        file_path: Optional[str] = None,
        hash: Optional[str] = None
    ) -> LogEntry:
        ...


class HashAlgorithm(Protocol):
    """
    Interface for incremental hash algorithms.

    new() returns a hashlib-style object with update() and hexdigest().
    """
    name: str

    def new(self):
        ...


class Fingerprinter(Protocol):
    """Interface for computing content digests."""

    def compute_digest(
        self,
        source: FileSource,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> str:
        """
        Read the whole byte stream of `source` and return its hex digest.

        Raises:
            UnreadableSource: if the stream cannot be opened or read.
            ScanCancelled: if stopped_flag returns True between chunks.
        """
        ...


class FileGrouper(Protocol):
    """Interface for grouping files by content digest."""

    def group_by_digest(self, files: List[FileRecord]) -> Dict[str, List[FileRecord]]:
        """Digest -> files, only buckets with 2+ files, first-encounter order."""
        ...

    def find_duplicates(self, files: List[FileRecord], log: Optional[LogRecorder] = None) -> List[DuplicateGroup]:
        """Build duplicate groups and optionally log one DUPLICATE entry per group."""
        ...


class Categorizer(Protocol):
    """Interface for rule-based categorization."""

    def categorize(self, files: List[FileRecord], log: Optional[LogRecorder] = None) -> Dict[str, List[FileRecord]]:
        """
        Assign each file one category (first matching rule wins).

        Returns:
            Category name -> files, in input order within each category.
        """
        ...
