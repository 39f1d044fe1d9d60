"""
Tests for ScanCommand — the orchestrator shared by the CLI and library callers.
Runs against real temporary files; trash calls are patched.
"""
import json
import logging
from unittest import mock
import pytest
from filededup.commands import ScanCommand
from filededup.core.exceptions import InvalidRule, ScanCancelled
from filededup.core.models import UNCATEGORIZED, LogType, ScanParams
from filededup.services.file_service import FileService


def all_paths(test_files):
    return [str(p) for p in test_files.values()]


class TestExecute:

    def test_scan_with_default_rules(self, test_files):
        result = ScanCommand().execute(ScanParams(paths=all_paths(test_files)))

        assert result.total_files == 5
        assert len(result.duplicate_groups) == 1
        group = result.duplicate_groups[0]
        assert [f.path for f in group.files] == [
            str(test_files["chrome_a"]), str(test_files["chrome_b"]), str(test_files["chrome_sub"])]
        assert group.category == "Browsers"
        assert [f.path for f in result.categories["Images"]] == [str(test_files["photo"])]
        assert [f.path for f in result.categories["Documents"]] == [str(test_files["readme"])]
        assert [f.path for f in result.categories[UNCATEGORIZED]] == [str(test_files["chrome_sub"])]

    def test_scan_with_rules_file(self, test_files, tmp_path):
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"rules": [
            {"name": "Installers", "conditions": {"extensions": [".exe"]}},
            {"name": "Browsers", "conditions": {"filenameContains": ["chrome"]}},
        ]}), encoding="utf-8")

        result = ScanCommand().execute(ScanParams(paths=all_paths(test_files), rules_file=str(rules_path)))

        assert len(result.categories["Installers"]) == 3
        assert "Browsers" not in result.categories

    def test_malformed_rules_file(self, test_files, tmp_path):
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(json.dumps({"rules": "nope"}), encoding="utf-8")

        with pytest.raises(InvalidRule):
            ScanCommand().execute(ScanParams(paths=all_paths(test_files), rules_file=str(rules_path)))

    def test_unusable_paths_reported_as_input_errors(self, test_files, tmp_path):
        command = ScanCommand()
        missing = str(tmp_path / "missing.bin")

        result = command.execute(ScanParams(paths=[str(test_files["readme"]), missing, str(tmp_path)]))

        assert result.total_files == 1
        assert [path for path, _ in command.input_errors] == [missing, str(tmp_path)]

    def test_unusable_paths_are_logged_and_skipped(self, test_files, tmp_path):
        """A path that cannot even be described still leaves a trace in the activity log."""
        command = ScanCommand()
        readme = str(test_files["readme"])
        missing = str(tmp_path / "missing.bin")

        result = command.execute(ScanParams(paths=[readme, missing]))

        assert result.skipped == [missing]
        messages = [(e.type, e.message, e.file_path) for e in command.get_log()]
        assert messages[0] == (LogType.SCAN, "Started scanning 2 files", None)
        assert messages[1][0] == LogType.SCAN
        assert messages[1][1].startswith("Failed to read file: Cannot stat file")
        assert messages[1][2] == missing
        assert (LogType.SCAN, "Scanned file", readme) in messages
        assert missing in command.session.export_log()

    def test_unusable_paths_are_reported_to_debug_log(self, test_files, tmp_path, caplog):
        with caplog.at_level(logging.DEBUG, logger="filededup.commands"):
            ScanCommand().execute(ScanParams(paths=[str(test_files["readme"]), str(tmp_path / "missing.bin")]))

        assert "1 of 2 input paths cannot be scanned" in caplog.text

    def test_cancellation_propagates(self, test_files):
        command = ScanCommand()
        with pytest.raises(ScanCancelled):
            command.execute(ScanParams(paths=all_paths(test_files)), stopped_flag=lambda: True)
        assert command.session.last_result is None

    def test_log_accumulates_across_executions(self, test_files):
        command = ScanCommand()
        command.execute(ScanParams(paths=[str(test_files["readme"])]))
        command.execute(ScanParams(paths=[str(test_files["photo"])]))

        starts = [e for e in command.get_log() if e.message.startswith("Started scanning")]
        assert len(starts) == 2


class TestDeleteDuplicates:

    def test_requires_a_scan(self):
        with pytest.raises(RuntimeError, match="No scan"):
            ScanCommand().delete_duplicates()

    def test_moves_all_but_first_and_logs(self, test_files):
        command = ScanCommand()
        command.execute(ScanParams(paths=all_paths(test_files)))
        assert command.reclaimable_bytes() == 2 * 1024

        with mock.patch.object(FileService, "move_to_trash") as trash:
            moved, failed = command.delete_duplicates()

        expected = [str(test_files["chrome_b"]), str(test_files["chrome_sub"])]
        assert [call.args[0] for call in trash.call_args_list] == expected
        assert moved == expected
        assert failed == []
        deletes = [e for e in command.get_log() if e.type == LogType.DELETE]
        assert [e.file_path for e in deletes] == expected
        assert command.session.last_result.duplicate_groups == []
        assert command.reclaimable_bytes() == 0

    def test_failed_deletions_are_not_logged(self, test_files):
        command = ScanCommand()
        command.execute(ScanParams(paths=all_paths(test_files)))
        locked = str(test_files["chrome_sub"])

        def fake_trash(path):
            if path == locked:
                raise RuntimeError("Failed to move to trash: permission denied")

        with mock.patch.object(FileService, "move_to_trash", side_effect=fake_trash):
            moved, failed = command.delete_duplicates()

        assert moved == [str(test_files["chrome_b"])]
        assert [path for path, _ in failed] == [locked]
        deletes = [e.file_path for e in command.get_log() if e.type == LogType.DELETE]
        assert deletes == [str(test_files["chrome_b"])]
        remaining = command.session.last_result.duplicate_groups
        assert [f.path for f in remaining[0].files] == [str(test_files["chrome_a"]), locked]
