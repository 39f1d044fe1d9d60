"""
filededup — duplicate file detection and rule-based categorization.

Core features:
- SHA-256 content fingerprints, computed in parallel per file
- Exact-duplicate groups in first-encounter order (first file = keeper)
- Ordered, first-match-wins categorization rules (JSON configurable)
- Append-only activity log with filtering and plain-text export
- Safe deletion to system trash (via send2trash) from the CLI
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("filededup")
except PackageNotFoundError:
    import tomllib
    from pathlib import Path

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API — only what users should import directly
from filededup.commands import ScanCommand
from filededup.core import (
    ScanSession, ScanResult, ScanParams, FileSource, FileRecord, DuplicateGroup,
    CategoryRule, RuleConditions, LogEntry, LogType, ActivityLog, DEFAULT_RULES,
    UnreadableSource, InvalidRule, ScanCancelled)
from filededup.services import DuplicateService, FileService, LogStore

__all__ = [
    "ScanCommand",
    "ScanSession",
    "ScanResult",
    "ScanParams",
    "FileSource",
    "FileRecord",
    "DuplicateGroup",
    "CategoryRule",
    "RuleConditions",
    "LogEntry",
    "LogType",
    "ActivityLog",
    "DEFAULT_RULES",
    "UnreadableSource",
    "InvalidRule",
    "ScanCancelled",
    "DuplicateService",
    "FileService",
    "LogStore",
    "__version__",
]
