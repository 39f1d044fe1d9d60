"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for fingerprinting, duplicate grouping, categorization and the activity log.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple
from enum import Enum
import os

UNCATEGORIZED = "Uncategorized"
DIGEST_LENGTH = 64


# =============================
# Enums
# =============================

class LogType(str, Enum):
    """Kinds of activity log entries."""
    SCAN = "SCAN"
    DUPLICATE = "DUPLICATE"
    CATEGORY = "CATEGORY"
    DELETE = "DELETE"

    @classmethod
    def get_all(cls):
        return [cls.SCAN, cls.DUPLICATE, cls.CATEGORY, cls.DELETE]


def extension_of(name: str) -> str:
    """Lowercased extension from the last dot of a filename ("" if none)."""
    index = name.rfind(".")
    return name[index:].lower() if index != -1 else ""


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileSource:
    """
    A raw file as handed over by the enumeration collaborator.
    The opener returns a fresh readable binary stream on every call.
    """
    path: str
    size: int
    opener: Callable[[], BinaryIO]
    name: Optional[str] = None

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"File size cannot be negative: {self.path}")
        if self.name is None:
            object.__setattr__(self, "name", os.path.basename(self.path))

    def open(self) -> BinaryIO:
        return self.opener()


@dataclass
class FileRecord:
    """
    A fingerprinted file inside one scan session.
    `category` is filled in by the categorizer.
    """
    path: str
    name: str
    size: int  # in bytes
    content_digest: str
    extension: Optional[str] = None
    category: Optional[str] = None
    raw_handle: Optional[FileSource] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.extension is None:
            self.extension = extension_of(self.name)
        else:
            self.extension = self.extension.lower()

    @classmethod
    def from_source(cls, source: FileSource, digest: str) -> "FileRecord":
        return cls(
            path=source.path,
            name=source.name,
            size=source.size,
            content_digest=digest,
            raw_handle=source,
        )

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass
class DuplicateGroup:
    """
    Two or more files sharing one content digest.
    The first file is the conventional keeper.
    """
    digest: str
    files: List[FileRecord]

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError("A duplicate group needs at least two files.")
        for file in self.files:
            if file.content_digest != self.digest:
                raise ValueError(f"File {file.path} does not match group digest.")

    @property
    def count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def category(self) -> Optional[str]:
        """Category of the keeper."""
        return self.files[0].category

    @property
    def keeper(self) -> FileRecord:
        return self.files[0]

    @property
    def size(self) -> int:
        return self.files[0].size

    def __repr__(self):
        return f"<DuplicateGroup digest={self.digest[:12]}, count={self.count}>"


@dataclass(frozen=True)
class RuleConditions:
    """Condition lists of a rule. An empty tuple means the list is not populated."""
    path_contains: Tuple[str, ...] = ()
    filename_contains: Tuple[str, ...] = ()
    extensions: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.path_contains or self.filename_contains or self.extensions)


@dataclass(frozen=True)
class CategoryRule:
    name: str
    conditions: RuleConditions = field(default_factory=RuleConditions)


@dataclass(frozen=True)
class LogEntry:
    """One activity log record. Timestamps are ISO-8601 in UTC."""
    timestamp: str
    type: LogType
    message: str
    file_path: Optional[str] = None
    hash: Optional[str] = None

    @classmethod
    def create(
            cls,
            log_type: LogType,
            message: str,
            file_path: Optional[str] = None,
            hash: Optional[str] = None
    ) -> "LogEntry":
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return cls(timestamp, LogType(log_type), message, file_path, hash)

    def to_dict(self) -> Dict[str, str]:
        data = {
            "timestamp": self.timestamp,
            "type": self.type.value,
            "message": self.message,
        }
        if self.file_path is not None:
            data["filePath"] = self.file_path
        if self.hash is not None:
            data["hash"] = self.hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "LogEntry":
        return cls(
            timestamp=data["timestamp"],
            type=LogType(data["type"]),
            message=data["message"],
            file_path=data.get("filePath"),
            hash=data.get("hash"),
        )


@dataclass(frozen=True)
class ScanResult:
    """
    Aggregate produced by one scan.
    total_files counts readable files only; unreadable paths are listed in `skipped`.
    """
    total_files: int
    duplicate_groups: List[DuplicateGroup]
    categories: Dict[str, List[FileRecord]]
    logs: List[LogEntry]
    skipped: List[str] = field(default_factory=list)

    @property
    def duplicate_files(self) -> int:
        return sum(group.count for group in self.duplicate_groups)


@dataclass
class ScanParams:
    """Parameters for a scan invocation, validated on creation."""
    paths: List[str]
    rules_file: Optional[str] = None
    max_workers: int = 4

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("Worker count must be at least 1")

        # Drop blanks and repeated paths, path is the key within a scan
        seen = set()
        normalized = []
        for path in self.paths:
            path = path.strip()
            if path and path not in seen:
                seen.add(path)
                normalized.append(path)
        self.paths = normalized
