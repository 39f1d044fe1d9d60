"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Deletion candidates and bookkeeping of scan results after files are removed.
"""
from typing import Collection, Dict, List, Tuple
from filededup.core.models import DuplicateGroup, FileRecord


class DuplicateService:
    @staticmethod
    def remove_files_from_groups(groups: List[DuplicateGroup], file_paths: Collection[str]) -> List[DuplicateGroup]:
        """
        Removes files with the specified paths from all duplicate groups.

        Files that match any of the provided file paths are removed from each group.
        Groups that contain fewer than 2 files after removal are discarded.

        Args:
            groups (list[DuplicateGroup]): List of duplicate groups to update.
            file_paths (Collection[str]): Paths of removed files.

        Returns:
            list[DuplicateGroup]: Updated list of duplicate groups.
        """
        removed = set(file_paths)
        updated_groups = []
        for group in groups:
            filtered_files = [f for f in group.files if f.path not in removed]
            if len(filtered_files) >= 2:
                updated_groups.append(DuplicateGroup(digest=group.digest, files=filtered_files))
        return updated_groups

    @staticmethod
    def remove_files_from_categories(
            categories: Dict[str, List[FileRecord]],
            file_paths: Collection[str]
    ) -> Dict[str, List[FileRecord]]:
        """Removes files from the category map; categories left empty are dropped."""
        removed = set(file_paths)
        updated = {}
        for name, files in categories.items():
            remaining = [f for f in files if f.path not in removed]
            if remaining:
                updated[name] = remaining
        return updated

    @staticmethod
    def keep_only_one_file_per_group(groups: List[DuplicateGroup]) -> Tuple[List[str], List[DuplicateGroup]]:
        """
        Keeps the first file of each group and marks the rest for deletion.
        Returns:
            - List of file paths to be deleted
            - Updated list of duplicate groups (empty once every group is reduced to its keeper)
        """
        files_to_delete = []

        for group in groups:
            for file in group.files[1:]:
                files_to_delete.append(file.path)

        updated_groups = DuplicateService.remove_files_from_groups(groups, files_to_delete)

        return files_to_delete, updated_groups

    @staticmethod
    def reclaimable_bytes(groups: List[DuplicateGroup], files_to_delete: Collection[str]) -> int:
        """Total size of the given files across the groups."""
        delete_set = set(files_to_delete)
        total_bytes = 0
        for group in groups:
            for file in group.files:
                if file.path in delete_set:
                    total_bytes += file.size
        return total_bytes
