"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/session.py
Scan session: the single entry point composing fingerprinting, duplicate grouping,
categorization and the activity log.

PIPELINE
--------
1. SCAN start entry
2. Fingerprinting     : every source hashed on a thread pool; results are collected
                        by input index and only used once ALL digests are complete
3. Per-file SCAN entries, appended by the calling thread in input order
4. Duplicate grouping : DUPLICATE entry per group
5. Categorization     : CATEGORY entry per file
6. SCAN completion entry

FAILURE POLICY
--------------
• An unreadable source is excluded from grouping and categorization, logged as a
  SCAN failure entry and listed in ScanResult.skipped; total_files counts readable files
• Any other fingerprinter failure is treated as an unreadable source
• Paths the caller could not describe (failed_inputs) are logged and skipped the same way
• Cancellation (stopped_flag) raises ScanCancelled: no partial result is returned,
  entries already appended stay in the log
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from filededup.core.activity_log import ActivityLog, EntryCollector
from filededup.core.categorizer import CategorizerImpl
from filededup.core.exceptions import ScanCancelled, UnreadableSource
from filededup.core.grouper import FileGrouperImpl
from filededup.core.hasher import HasherImpl
from filededup.core.interfaces import Categorizer, FileGrouper, Fingerprinter
from filededup.core.models import CategoryRule, FileRecord, FileSource, LogEntry, LogType, ScanResult
from filededup.core.rules import DEFAULT_RULES
from filededup.services.duplicate_service import DuplicateService

logger = logging.getLogger(__name__)


class ScanSession:
    """
    Owns the activity log and the latest scan result.
    One session may run several scans; the log accumulates across them.
    """

    def __init__(
            self,
            rules: Sequence[CategoryRule] = DEFAULT_RULES,
            hasher: Optional[Fingerprinter] = None,
            grouper: Optional[FileGrouper] = None,
            categorizer: Optional[Categorizer] = None,
            log: Optional[ActivityLog] = None,
            max_workers: int = 4
    ):
        if max_workers < 1:
            raise ValueError("Worker count must be at least 1")
        self.hasher = hasher or HasherImpl()
        self.grouper = grouper or FileGrouperImpl()
        self.categorizer = categorizer or CategorizerImpl(rules)
        self.log = log if log is not None else ActivityLog()
        self.max_workers = max_workers
        self.last_result: Optional[ScanResult] = None

    def scan(
            self,
            files: Iterable[FileSource],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            failed_inputs: Iterable[Tuple[str, str]] = ()
    ) -> ScanResult:
        """
        Fingerprints, groups and categorizes `files`.

        `failed_inputs` are (path, reason) pairs the caller could not turn into
        a FileSource; they are logged and skipped like unreadable sources.

        Raises:
            ScanCancelled: if stopped_flag returns True at any checkpoint
        """
        sources = self._unique_sources(files)
        failed_inputs = list(failed_inputs)
        recorder = EntryCollector(self.log)
        recorder.record(LogType.SCAN, f"Started scanning {len(sources) + len(failed_inputs)} files")

        skipped: List[str] = []
        for path, reason in failed_inputs:
            skipped.append(path)
            recorder.record(LogType.SCAN, f"Failed to read file: {reason}", path)

        if not sources and not skipped:
            return self._finish(ScanResult(0, [], {}, list(recorder.entries)))

        self._check_stopped(stopped_flag)
        outcomes = self._fingerprint_all(sources, stopped_flag, progress_callback)

        records: List[FileRecord] = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, UnreadableSource):
                logger.warning(str(outcome))
                skipped.append(source.path)
                recorder.record(LogType.SCAN, f"Failed to read file: {outcome.reason}", source.path)
                continue
            record = FileRecord.from_source(source, outcome)
            records.append(record)
            recorder.record(LogType.SCAN, "Scanned file", record.path, record.content_digest)

        self._check_stopped(stopped_flag)
        groups = self.grouper.find_duplicates(records, recorder)
        categories = self.categorizer.categorize(records, recorder)
        recorder.record(LogType.SCAN, f"Scan completed. Found {len(groups)} duplicate groups")

        return self._finish(ScanResult(
            total_files=len(records),
            duplicate_groups=groups,
            categories=categories,
            logs=list(recorder.entries),
            skipped=skipped,
        ))

    def export_log(self) -> str:
        """Whole session log as plain text."""
        return self.log.export()

    def deletion_candidates(self) -> List[str]:
        """All members but the keeper of every group in the last result."""
        if self.last_result is None:
            return []
        paths, _ = DuplicateService.keep_only_one_file_per_group(self.last_result.duplicate_groups)
        return paths

    def record_deletions(self, paths: Iterable[str]) -> List[LogEntry]:
        """Logs files the caller has actually removed."""
        return [self.log.record(LogType.DELETE, "File deleted", path) for path in paths]

    def remove_files(self, paths: Iterable[str]) -> Optional[ScanResult]:
        """
        Drops removed files from the last result.
        Groups left with fewer than two files and empty categories disappear.
        """
        if self.last_result is None:
            return None
        removed = set(paths)
        result = self.last_result
        remaining = [f for files in result.categories.values() for f in files if f.path not in removed]
        self.last_result = ScanResult(
            total_files=len(remaining),
            duplicate_groups=DuplicateService.remove_files_from_groups(result.duplicate_groups, removed),
            categories=DuplicateService.remove_files_from_categories(result.categories, removed),
            logs=result.logs,
            skipped=result.skipped,
        )
        return self.last_result

    def _fingerprint_all(
            self,
            sources: List[FileSource],
            stopped_flag: Optional[Callable[[], bool]],
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]]
    ) -> List[Union[str, UnreadableSource]]:
        """Digest or UnreadableSource per source, in input order."""
        outcomes: List[Union[str, UnreadableSource, None]] = [None] * len(sources)
        total = len(sources)
        processed = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.hasher.compute_digest, source, stopped_flag): index
                for index, source in enumerate(sources)
            }
            try:
                for future in as_completed(futures):
                    index = futures[future]
                    try:
                        outcomes[index] = future.result()
                    except UnreadableSource as e:
                        outcomes[index] = e
                    except ScanCancelled:
                        raise
                    except Exception as e:
                        logger.warning(f"Fingerprinting failed for {sources[index].path}: {e}")
                        outcomes[index] = UnreadableSource(sources[index].path, str(e))

                    processed += 1
                    if progress_callback:
                        progress_callback("Fingerprinting", processed, total)
                    self._check_stopped(stopped_flag)
            except ScanCancelled:
                for future in futures:
                    future.cancel()
                logger.debug("Scan cancelled during fingerprinting")
                raise

        return outcomes

    def _unique_sources(self, files: Iterable[FileSource]) -> List[FileSource]:
        sources = []
        seen = set()
        for source in files:
            if source.path in seen:
                logger.warning(f"Ignoring repeated path in scan input: {source.path}")
                continue
            seen.add(source.path)
            sources.append(source)
        return sources

    def _finish(self, result: ScanResult) -> ScanResult:
        self.last_result = result
        return result

    @staticmethod
    def _check_stopped(stopped_flag: Optional[Callable[[], bool]]) -> None:
        if stopped_flag and stopped_flag():
            raise ScanCancelled("Scan cancelled by caller")
