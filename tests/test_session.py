"""
Integration tests for ScanSession — the single scan entry point.
Covers the full pipeline, partial failures, cancellation and log ordering.
"""
import hashlib
import io
import itertools
import pytest
from conftest import make_source, failing_source
from filededup.core.activity_log import ActivityLog
from filededup.core.exceptions import ScanCancelled
from filededup.core.hasher import HasherImpl
from filededup.core.models import UNCATEGORIZED, CategoryRule, FileSource, LogType, RuleConditions
from filededup.core.session import ScanSession

BROWSERS = CategoryRule("Browsers", RuleConditions(filename_contains=("chrome",)))
PLAYERS = CategoryRule("Players", RuleConditions(filename_contains=("vlc",)))


class TestScan:

    def test_duplicates_and_categories(self):
        chrome = b"chrome binary"
        files = [
            make_source("/a/chrome.app", chrome),
            make_source("/b/chrome.exe", chrome),
            make_source("/c/vlc.app", b"vlc binary"),
        ]

        result = ScanSession(rules=[BROWSERS, PLAYERS]).scan(files)

        assert result.total_files == 3
        assert len(result.duplicate_groups) == 1
        group = result.duplicate_groups[0]
        assert group.digest == hashlib.sha256(chrome).hexdigest()
        assert group.count == 2
        assert [f.path for f in group.files] == ["/a/chrome.app", "/b/chrome.exe"]
        assert group.category == "Browsers"
        assert [f.path for f in result.categories["Browsers"]] == ["/a/chrome.app", "/b/chrome.exe"]
        assert [f.path for f in result.categories["Players"]] == ["/c/vlc.app"]

    def test_records_carry_digest_and_extension(self):
        result = ScanSession(rules=[]).scan([make_source("/x/Photo.JPG", b"jpg")])

        record = result.categories[UNCATEGORIZED][0]
        assert record.content_digest == hashlib.sha256(b"jpg").hexdigest()
        assert record.extension == ".jpg"
        assert record.name == "Photo.JPG"
        assert record.size == 3

    def test_empty_input(self):
        """Empty file list → no groups, no categories, a single SCAN start entry."""
        result = ScanSession().scan([])

        assert result.total_files == 0
        assert result.duplicate_groups == []
        assert result.categories == {}
        assert len(result.logs) == 1
        assert result.logs[0].type == LogType.SCAN
        assert result.logs[0].message == "Started scanning 0 files"

    def test_log_sequence(self):
        files = [make_source("/a/chrome.app", b"x"), make_source("/b/chrome.exe", b"x")]

        result = ScanSession(rules=[BROWSERS]).scan(files)

        assert [(e.type, e.message) for e in result.logs] == [
            (LogType.SCAN, "Started scanning 2 files"),
            (LogType.SCAN, "Scanned file"),
            (LogType.SCAN, "Scanned file"),
            (LogType.DUPLICATE, "Found 2 duplicate files"),
            (LogType.CATEGORY, "File categorized as Browsers"),
            (LogType.CATEGORY, "File categorized as Browsers"),
            (LogType.SCAN, "Scan completed. Found 1 duplicate groups"),
        ]

    def test_per_file_entries_follow_input_order_with_many_workers(self):
        files = [make_source(f"/f/{i:03d}.bin", bytes([i]) * (1000 - i)) for i in range(60)]

        result = ScanSession(max_workers=8).scan(files)

        scanned = [e.file_path for e in result.logs if e.message == "Scanned file"]
        categorized = [e.file_path for e in result.logs if e.type == LogType.CATEGORY]
        assert scanned == [s.path for s in files]
        assert categorized == [s.path for s in files]

    def test_repeated_paths_are_scanned_once(self):
        files = [make_source("/same", b"1"), make_source("/same", b"1")]
        result = ScanSession().scan(files)
        assert result.total_files == 1
        assert result.duplicate_groups == []

    def test_log_accumulates_across_scans(self):
        log = ActivityLog()
        session = ScanSession(log=log)

        first = session.scan([make_source("/a", b"1")])
        second = session.scan([make_source("/b", b"2")])

        assert len(log) == len(first.logs) + len(second.logs)
        assert second.logs[0].message == "Started scanning 1 files"

    def test_result_logs_hold_only_this_scans_entries(self):
        """Other writers on a shared log never leak into the result."""
        log = ActivityLog()
        session = ScanSession(log=log)

        def other_writer(stage, current, total):
            log.record(LogType.DELETE, f"unrelated {current}")

        result = session.scan([make_source("/a", b"1"), make_source("/b", b"1")], progress_callback=other_writer)

        assert not any(e.message.startswith("unrelated") for e in result.logs)
        assert result.logs[0].message == "Started scanning 2 files"
        assert len(log) == len(result.logs) + 2

    def test_result_logs_survive_clear_during_scan(self):
        log = ActivityLog()
        session = ScanSession(log=log)

        result = session.scan(
            [make_source("/a", b"1"), make_source("/b", b"1")],
            progress_callback=lambda stage, current, total: log.clear() if current == 1 else None
        )

        assert [e.message for e in result.logs] == [
            "Started scanning 2 files",
            "Scanned file",
            "Scanned file",
            "Found 2 duplicate files",
            "File marked as uncategorized",
            "File marked as uncategorized",
            "Scan completed. Found 1 duplicate groups",
        ]
        assert len(log) == len(result.logs) - 1

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            ScanSession(max_workers=0)


class TestUnreadableSources:
    """One unreadable file degrades only its own entry, never the scan."""

    def test_unreadable_file_is_excluded_and_logged(self):
        files = [
            make_source("/ok/a.txt", b"same"),
            failing_source("/locked/b.txt"),
            make_source("/ok/c.txt", b"same"),
        ]

        result = ScanSession(rules=[]).scan(files)

        assert result.total_files == 2
        assert result.skipped == ["/locked/b.txt"]
        assert len(result.duplicate_groups) == 1
        assert [f.path for f in result.duplicate_groups[0].files] == ["/ok/a.txt", "/ok/c.txt"]
        categorized = [f.path for members in result.categories.values() for f in members]
        assert "/locked/b.txt" not in categorized

        failures = [e for e in result.logs if e.message.startswith("Failed to read file")]
        assert len(failures) == 1
        assert failures[0].type == LogType.SCAN
        assert failures[0].file_path == "/locked/b.txt"
        assert failures[0].hash is None

    def test_opener_raising_any_error_is_isolated(self):
        def revoked():
            raise RuntimeError("handle revoked")

        files = [make_source("/ok/a", b"x"), FileSource(path="/bad", size=1, opener=revoked)]

        result = ScanSession().scan(files)

        assert result.total_files == 1
        assert result.skipped == ["/bad"]
        failures = [e for e in result.logs if e.file_path == "/bad"]
        assert [e.message for e in failures] == ["Failed to read file: handle revoked"]

    def test_stream_raising_any_error_is_isolated(self):
        class DroppingStream(io.BytesIO):
            def read(self, size=-1):
                raise Exception("network dropped")

        files = [
            make_source("/ok/a", b"same"),
            FileSource(path="/net/b", size=4, opener=lambda: DroppingStream(b"same")),
            make_source("/ok/c", b"same"),
        ]

        result = ScanSession().scan(files)

        assert result.skipped == ["/net/b"]
        assert [f.path for f in result.duplicate_groups[0].files] == ["/ok/a", "/ok/c"]

    def test_unexpected_fingerprinter_failure_is_isolated(self):
        """Even a fingerprinter that breaks its contract cannot abort the batch."""
        class FlakyHasher(HasherImpl):
            def compute_digest(self, source, stopped_flag=None):
                if source.path == "/flaky":
                    raise KeyError("lost state")
                return super().compute_digest(source, stopped_flag)

        result = ScanSession(hasher=FlakyHasher()).scan([make_source("/fine", b"1"), make_source("/flaky", b"2")])

        assert result.total_files == 1
        assert result.skipped == ["/flaky"]

    def test_failed_inputs_are_logged_and_skipped(self):
        result = ScanSession().scan(
            [make_source("/ok/a", b"x")],
            failed_inputs=[("/gone", "Cannot stat file /gone: No such file")]
        )

        assert result.total_files == 1
        assert result.skipped == ["/gone"]
        assert [(e.message, e.file_path) for e in result.logs[:2]] == [
            ("Started scanning 2 files", None),
            ("Failed to read file: Cannot stat file /gone: No such file", "/gone"),
        ]

    def test_only_failed_inputs(self):
        result = ScanSession().scan([], failed_inputs=[("/gone", "missing")])

        assert result.total_files == 0
        assert result.skipped == ["/gone"]
        assert [e.message for e in result.logs] == [
            "Started scanning 1 files",
            "Failed to read file: missing",
            "Scan completed. Found 0 duplicate groups",
        ]

    def test_all_files_unreadable(self):
        result = ScanSession().scan([failing_source("/x"), failing_source("/y")])

        assert result.total_files == 0
        assert result.skipped == ["/x", "/y"]
        assert result.duplicate_groups == []
        assert result.categories == {}
        assert result.logs[-1].message == "Scan completed. Found 0 duplicate groups"


class TestCancellation:
    """A cancelled scan surfaces no partial result."""

    def test_cancel_before_fingerprinting(self):
        session = ScanSession()

        with pytest.raises(ScanCancelled):
            session.scan([make_source("/a", b"1"), make_source("/b", b"1")], stopped_flag=lambda: True)

        assert session.last_result is None
        assert [e.message for e in session.log] == ["Started scanning 2 files"]

    def test_cancel_during_fingerprinting(self):
        calls = itertools.count()
        session = ScanSession(max_workers=2)
        files = [make_source(f"/f{i}", b"x" * 10) for i in range(20)]

        with pytest.raises(ScanCancelled):
            session.scan(files, stopped_flag=lambda: next(calls) > 3)

        assert session.last_result is None
        assert not any(e.type in (LogType.DUPLICATE, LogType.CATEGORY) for e in session.log)

    def test_progress_callback_reports_every_file(self):
        progress = []
        files = [make_source(f"/f{i}", bytes([i])) for i in range(5)]

        ScanSession().scan(files, progress_callback=lambda stage, cur, total: progress.append((stage, cur, total)))

        assert progress[-1] == ("Fingerprinting", 5, 5)
        assert [cur for _, cur, _ in progress] == [1, 2, 3, 4, 5]


class TestDeletionBookkeeping:

    def setup_method(self):
        self.session = ScanSession(rules=[BROWSERS])
        self.session.scan([
            make_source("/a/chrome.app", b"dup"),
            make_source("/b/chrome.exe", b"dup"),
            make_source("/c/chrome.dmg", b"dup"),
            make_source("/d/notes.txt", b"unique"),
        ])

    def test_deletion_candidates_are_all_but_first(self):
        assert self.session.deletion_candidates() == ["/b/chrome.exe", "/c/chrome.dmg"]

    def test_record_deletions_appends_delete_entries(self):
        entries = self.session.record_deletions(["/b/chrome.exe"])

        assert len(entries) == 1
        assert entries[0].type == LogType.DELETE
        assert entries[0].message == "File deleted"
        assert list(self.session.log)[-1] == entries[0]

    def test_remove_files_drops_group_reduced_to_one(self):
        result = self.session.remove_files(["/b/chrome.exe", "/c/chrome.dmg"])

        assert result.duplicate_groups == []
        assert [f.path for f in result.categories["Browsers"]] == ["/a/chrome.app"]
        assert result.total_files == 2

    def test_remove_files_keeps_group_with_two_left(self):
        result = self.session.remove_files(["/c/chrome.dmg"])

        assert len(result.duplicate_groups) == 1
        assert result.duplicate_groups[0].count == 2

    def test_remove_files_drops_empty_categories(self):
        result = self.session.remove_files(["/d/notes.txt"])
        assert UNCATEGORIZED not in result.categories

    def test_no_scan_yet(self):
        session = ScanSession()
        assert session.deletion_candidates() == []
        assert session.remove_files(["/x"]) is None

    def test_export_log_contains_every_type(self):
        self.session.record_deletions(["/b/chrome.exe"])
        text = self.session.export_log()
        for token in ("SCAN:", "DUPLICATE:", "CATEGORY:", "DELETE:"):
            assert token in text
