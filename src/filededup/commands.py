"""
Unified command orchestrator for scanning.
This is the SINGLE source of truth for workflow logic — used by the CLI and by library callers.
"""
import logging
from typing import List, Optional, Callable, Tuple

from filededup.core.activity_log import ActivityLog
from filededup.core.models import LogEntry, ScanParams, ScanResult
from filededup.core.rules import DEFAULT_RULES, load_rules
from filededup.core.session import ScanSession
from filededup.services.file_service import FileService
from filededup.services.duplicate_service import DuplicateService

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates the scan workflow:
    1. Load the rule set (JSON file or built-in defaults)
    2. Describe every input path as a FileSource (unusable paths are logged and skipped)
    3. Run the scan session with progress/cancellation support
    4. Optionally move duplicates to trash and log the deletions

    Usage:
        params = ScanParams(paths=[...], rules_file="rules.json")
        command = ScanCommand()
        result = command.execute(params, progress_callback=printer, stopped_flag=check)
        moved, failed = command.delete_duplicates()
    """

    def __init__(self, log: Optional[ActivityLog] = None):
        self._log = log if log is not None else ActivityLog()
        self._session: Optional[ScanSession] = None
        self.input_errors: List[Tuple[str, str]] = []

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> ScanResult:
        """
        Execute a scan with given parameters.

        Returns:
            ScanResult of the scan

        Raises:
            InvalidRule: If the rules file is malformed
            RuntimeError: If the rules file cannot be read
            ScanCancelled: If stopped_flag requested cancellation
        """
        rules = load_rules(params.rules_file) if params.rules_file else DEFAULT_RULES

        sources, self.input_errors = FileService.sources_from_paths(params.paths)
        if self.input_errors:
            logger.debug(f"{len(self.input_errors)} of {len(params.paths)} input paths cannot be scanned")

        self._session = ScanSession(rules=rules, log=self._log, max_workers=params.max_workers)
        return self._session.scan(
            sources,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback,
            failed_inputs=self.input_errors
        )

    def delete_duplicates(self) -> Tuple[List[str], List[Tuple[str, str]]]:
        """
        Moves all-but-first file of every group to trash.
        Only files actually moved are logged as DELETE and dropped from the result.
        """
        if self._session is None:
            raise RuntimeError("No scan has been executed")

        files_to_delete = self._session.deletion_candidates()
        moved, failed = FileService.move_multiple_to_trash(files_to_delete)
        self._session.record_deletions(moved)
        self._session.remove_files(moved)
        return moved, failed

    def reclaimable_bytes(self) -> int:
        if self._session is None or self._session.last_result is None:
            return 0
        return DuplicateService.reclaimable_bytes(
            self._session.last_result.duplicate_groups,
            self._session.deletion_candidates()
        )

    def get_log(self) -> List[LogEntry]:
        """Session log entries."""
        return list(self._log.entries)
