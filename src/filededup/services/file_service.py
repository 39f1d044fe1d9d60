"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Local-file operations around the core: building file sources for explicit paths
and moving confirmed duplicates to the system trash.
"""
import logging
from functools import partial
from pathlib import Path
from typing import List, Tuple
from send2trash import send2trash

from filededup.core.models import FileSource

logger = logging.getLogger(__name__)


class FileService:
    """
    File operations used by the CLI.
    Deletion always goes to the system trash, never a permanent erase.
    """

    @staticmethod
    def source_from_path(file_path: str) -> FileSource:
        """
        Describes one regular file. The stream is opened lazily by the fingerprinter.
        Directories are rejected; walking them is up to the caller.
        """
        path = Path(file_path)
        if path.is_dir():
            raise ValueError(f"Path is a directory, not a file: {path}")
        try:
            size = path.stat().st_size
        except OSError as e:
            raise RuntimeError(f"Cannot stat file {path}: {e}") from e
        return FileSource(path=str(path), size=size, opener=partial(open, path, "rb"), name=path.name)

    @classmethod
    def sources_from_paths(cls, file_paths: List[str]) -> Tuple[List[FileSource], List[Tuple[str, str]]]:
        """Sources for every usable path plus (path, error) for the rest."""
        sources = []
        errors = []
        for file_path in file_paths:
            try:
                sources.append(cls.source_from_path(file_path))
            except (ValueError, RuntimeError) as e:
                logger.warning(str(e))
                errors.append((file_path, str(e)))
        return sources, errors

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise RuntimeError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @classmethod
    def move_multiple_to_trash(cls, file_paths: List[str]) -> Tuple[List[str], List[Tuple[str, str]]]:
        """
        Moves files to trash one by one; a failure never stops the batch.
        Returns:
            - Paths moved to trash
            - (path, error message) for every failure
        """
        moved = []
        errors = []
        for path in file_paths:
            try:
                cls.move_to_trash(path)
                moved.append(path)
            except RuntimeError as e:
                logger.warning(f"Failed to delete {path}: {e}")
                errors.append((path, str(e)))
        return moved, errors
