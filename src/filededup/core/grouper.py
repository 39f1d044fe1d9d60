"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Partitions fingerprinted files into duplicate groups by content digest.
Bucket order and member order both follow first encounter in the input.
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from filededup.core.interfaces import FileGrouper, LogRecorder
from filededup.core.models import DuplicateGroup, FileRecord, LogType

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    Groups files by their content digest and reports groups of 2+ files.
    Never chooses which files to delete; the keeper is simply the first member.
    """

    def group_by_digest(self, files: List[FileRecord]) -> Dict[str, List[FileRecord]]:
        """Groups files by content digest."""
        return self._group_by(files, lambda f: f.content_digest)

    def find_duplicates(
            self,
            files: List[FileRecord],
            log: Optional[LogRecorder] = None
    ) -> List[DuplicateGroup]:
        """
        Builds one DuplicateGroup per digest shared by 2+ files.
        If a log is given, one DUPLICATE entry is appended per group.
        """
        groups = [
            DuplicateGroup(digest=digest, files=members)
            for digest, members in self.group_by_digest(files).items()
        ]

        if log is not None:
            for group in groups:
                log.record(
                    LogType.DUPLICATE,
                    f"Found {group.count} duplicate files",
                    ", ".join(f.path for f in group.files),
                    group.digest,
                )

        logger.debug(f"Found {len(groups)} duplicate groups among {len(files)} files")
        return groups

    @staticmethod
    def _group_by(files: List[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group files by any computed key in a single pass.
        Args:
            files: List of files to group
            key_func: Function that computes a hashable key from a FileRecord
        Returns:
            Dict[key, List[FileRecord]] with only buckets of 2+ files,
            in order of each key's first occurrence
        """
        buckets: Dict[Any, List[FileRecord]] = {}
        for file in files:
            key = key_func(file)
            if key is None:
                continue
            buckets.setdefault(key, []).append(file)

        return {key: group for key, group in buckets.items() if len(group) >= 2}
