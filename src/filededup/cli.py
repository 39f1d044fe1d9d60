#!/usr/bin/env python3
"""
filededup CLI — Command line interface for duplicate detection and file categorization.
Files are given explicitly (arguments or stdin); no directory is walked.
All deletions are safe: files are moved to the system trash, never permanently erased.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import json
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from filededup.core.activity_log import export_entries
from filededup.core.exceptions import InvalidRule, ScanCancelled
from filededup.core.models import ScanParams, ScanResult
from filededup.core.rules import DEFAULT_RULES, load_rules, rules_to_config
from filededup.commands import ScanCommand
from filededup.utils.convert_utils import ConvertUtils
from filededup.services.log_store import LogStore
from filededup.aliases import (
    LOG_TYPE_ALIASES, LOG_TYPE_CHOICES, LOG_TYPE_HELP_TEXT,
    RULES_HELP_TEXT, EPILOG_TEXT
)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.command = ScanCommand()

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            description="filededup — duplicate file finder and rule-based categorizer",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "paths",
            nargs="*",
            metavar="PATH",
            help="Files to scan. Use '-' (or nothing) to read newline-separated paths from stdin"
        )

        parser.add_argument(
            "--rules", "-r",
            default=None,
            type=str,
            metavar='',
            help=RULES_HELP_TEXT
        )
        parser.add_argument(
            "--dump-rules",
            action="store_true",
            help="Print the active rule set (built-in or --rules) as JSON and exit.\n"
                 "Useful as a template for a custom rules file"
        )
        parser.add_argument(
            "--workers", "-w",
            default=4,
            type=int,
            metavar='',
            help="Number of parallel fingerprinting workers. Default: 4"
        )

        # Output options
        parser.add_argument(
            "--categories", "-c",
            action="store_true",
            help="Print files grouped by category"
        )
        parser.add_argument(
            "--show-log",
            action="store_true",
            help="Print the activity log of this run"
        )
        parser.add_argument(
            "--log-type",
            choices=LOG_TYPE_CHOICES,
            default=None,
            type=str,
            help=LOG_TYPE_HELP_TEXT
        )
        parser.add_argument(
            "--search",
            default=None,
            type=str,
            metavar='',
            help="Show only log entries whose message or file path contains this text (with --show-log)"
        )
        parser.add_argument(
            "--export-log",
            default=None,
            type=str,
            metavar='',
            help="Write the activity log as plain text to this file"
        )
        parser.add_argument(
            "--log-store",
            default=None,
            type=str,
            metavar='',
            help="Append this run's log entries to a JSON log store"
        )

        # Actions
        parser.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the first file of each duplicate group and move the rest to trash. "
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")

        # Prevent interactive confirmation in non-TTY environments
        if args.keep_one and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        if args.workers < 1:
            self.error_exit("Worker count must be at least 1")

        if args.rules:
            rules_path = Path(args.rules)
            if not rules_path.is_file():
                self.error_exit(f"Rules file not found: {args.rules}")

        if (args.log_type or args.search) and not args.show_log:
            self.warning("--log-type and --search only apply together with --show-log")

    def read_paths(self, args: argparse.Namespace) -> List[str]:
        """Paths from arguments, or from stdin for '-' / no arguments."""
        if args.paths and args.paths != ["-"]:
            return list(args.paths)

        if sys.stdin.isatty():
            self.error_exit("No input files. Pass file paths or pipe them in, e.g.: find DIR -type f | filededup -")
        return [line.rstrip("\n") for line in sys.stdin if line.strip()]

    def create_params(self, args: argparse.Namespace, paths: List[str]) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams(paths=paths, rules_file=args.rules, max_workers=args.workers)
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
            sys.stderr.flush()
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
            sys.stderr.flush()

    @staticmethod
    def stopped_flag() -> bool:
        """Check if operation should stop (Ctrl+C is handled by main)."""
        return False

    def run_scan(self, params: ScanParams) -> ScanResult:
        """Execute the scan workflow."""
        if self.verbose:
            print(f"Scanning {len(params.paths)} files with {params.max_workers} workers...")

        try:
            result = self.command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag
            )
        except InvalidRule as e:
            self.error_exit(f"Invalid rules: {e}")
        except ScanCancelled:
            self.error_exit("Scan cancelled", code=130)
        except RuntimeError as e:
            self.error_exit(f"Scan failed: {e}")

        if self.verbose:
            sys.stderr.write("\n")

        input_errors = dict(self.command.input_errors)
        for path in result.skipped:
            if path in input_errors:
                self.warning(f"Skipped {path}: {input_errors[path]}")
            else:
                self.warning(f"Unreadable file skipped: {path}")
        return result

    def output_results(self, result: ScanResult) -> None:
        """Output duplicate groups as plain text, keeper first."""
        if self.quiet:
            return

        print(f"Scanned {result.total_files} files")
        groups = result.duplicate_groups
        if not groups:
            print("No duplicate groups found.")
            return

        print(f"\nFound {len(groups)} duplicate groups ({result.duplicate_files} files)")

        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.size)
            print(
                f"\n📁 Group {idx} | Hash: {ConvertUtils.short_digest(group.digest)} "
                f"| Size: {size_str} | Files: {group.count} | Category: {group.category}"
            )
            for file in group.files:
                print(f"   {file.path}")

    def output_categories(self, result: ScanResult) -> None:
        if self.quiet:
            return
        print("\nCategories:")
        for name, files in result.categories.items():
            print(f"\n🏷  {name} ({len(files)})")
            for file in files:
                print(f"   {file.path} [{ConvertUtils.bytes_to_human(file.size)}]")

    def output_log(self, log_type: Optional[str], search: Optional[str]) -> None:
        session = self.command.session
        entries = session.log.filter(
            log_type=LOG_TYPE_ALIASES[log_type] if log_type else None,
            search=search
        )
        text = export_entries(entries)
        print("\nActivity log:")
        print(text if text else "No log entries match the filters.")

    def execute_keep_one(self, result: ScanResult, force: bool = False) -> bool:
        """
        Keep the first file per group, move the rest to trash.
        Returns False only when every deletion failed.
        """
        groups = result.duplicate_groups
        if not groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return True

        files_to_delete = self.command.session.deletion_candidates()
        space_saved_str = ConvertUtils.bytes_to_human(self.command.reclaimable_bytes())

        # Always show deletion preview before action (safety first)
        print()
        for idx, group in enumerate(groups, 1):
            print(f"📁 Group {idx} | Hash: {ConvertUtils.short_digest(group.digest)} | Files: {group.count}")
            print("-" * 60)
            print(f"   [KEEP] {group.keeper.path}")
            for file in group.files[1:]:
                print(f"   [DEL]  {file.path}")
            print()

        print("=" * 60)
        print(f"Summary: Keep 1 file per group ({len(groups)} files preserved, {len(files_to_delete)} files deleted)")
        print(f"Total space saved: {space_saved_str}")
        print()

        if force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        else:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Lost interactive terminal during operation. "
                    "Use --force to proceed in non-interactive environments."
                )

            response = input(f"Are you sure you want to move {len(files_to_delete)} files to trash? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return True

        print(f"\nMoving {len(files_to_delete)} files to trash...")
        moved, failed = self.command.delete_duplicates()

        if not failed:
            print(f"✅ Successfully moved {len(moved)} files to trash.")
            return True

        if moved:
            print(f"\n⚠️  Partial success: {len(moved)}/{len(files_to_delete)} files moved to trash.")
        else:
            print("\n❌ No files were moved to trash.")
        print(f"Failed to delete {len(failed)} file(s):")
        for path, error in failed[:5]:
            print(f"  • {os.path.basename(path)}: {error.split(':')[-1].strip()}")
        if len(failed) > 5:
            print(f"  ...and {len(failed) - 5} more files")
        return bool(moved)

    def dump_rules(self, rules_file: Optional[str]) -> None:
        """Print the rule set as a JSON rules document."""
        try:
            rules = load_rules(rules_file) if rules_file else DEFAULT_RULES
        except InvalidRule as e:
            self.error_exit(f"Invalid rules: {e}")
        except RuntimeError as e:
            self.error_exit(str(e))
        print(json.dumps(rules_to_config(rules), indent=2))

    def save_logs(self, export_path: Optional[str], store_path: Optional[str]) -> None:
        if export_path:
            try:
                Path(export_path).write_text(self.command.session.export_log() + "\n", encoding="utf-8")
            except OSError as e:
                self.error_exit(f"Failed to export log: {e}")
            if not self.quiet:
                print(f"Activity log exported to {export_path}")

        if store_path:
            try:
                LogStore(store_path).append(self.command.get_log())
            except RuntimeError as e:
                self.error_exit(str(e))

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> int:
        """Main entry point with conditional output behavior. Returns the exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("filededup").setLevel(logging.DEBUG)

        self.validate_args(args)
        if args.dump_rules:
            self.dump_rules(args.rules)
            return 0

        params = self.create_params(args, self.read_paths(args))

        result = self.run_scan(params)
        self.output_results(result)

        if args.categories:
            self.output_categories(result)

        exit_code = 0
        if args.keep_one:
            if not self.execute_keep_one(result, force=args.force):
                exit_code = 1

        if args.show_log:
            self.output_log(args.log_type, args.search)

        self.save_logs(args.export_log, args.log_store)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")
        return exit_code


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
