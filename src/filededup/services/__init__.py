"""File operations, duplicate bookkeeping and log persistence services."""

from .file_service import FileService
from .duplicate_service import DuplicateService
from .log_store import LogStore

__all__ = ["FileService", "DuplicateService", "LogStore"]
