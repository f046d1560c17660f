#!/usr/bin/env python3
"""
dupscan CLI — command line interface for duplicate file detection.
Runs the same ScanCommand as library callers and prints a text or JSON report.
Read-only: nothing on disk is modified.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import json
import logging
import os
import sys
import threading
import time
from typing import List, NoReturn, Optional

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import xxhash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupscan.commands import ScanCommand
from dupscan.core.errors import DupScanError
from dupscan.core.models import DuplicateGroup, ScanOptions, ScanParams, ScanReport, ScanStatus
from dupscan.core.progress import CompleteEvent, ProgressEvent, ScanEvent, WarningEvent
from dupscan.services.duplicate_service import DuplicateService
from dupscan.utils.convert_utils import ConvertUtils
from dupscan.aliases import (
    ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, MODE_ALIASES, MODE_CHOICES, MODE_HELP_TEXT, EPILOG_TEXT
)


class ConsoleProgressSink:
    """Prints scan events to stderr. Called from walker and worker threads."""

    def __init__(self, verbose: bool = False, quiet: bool = False, stream=None):
        self.verbose = verbose
        self.quiet = quiet
        self.stream = stream or sys.stderr
        self._lock = threading.Lock()

    def __call__(self, event: ScanEvent) -> None:
        with self._lock:
            if isinstance(event, ProgressEvent):
                if self.verbose:
                    self.stream.write(
                        f"\r  [{event.stage}] {event.processed_dirs} dirs, {event.processed_files} files..."
                    )
                    self.stream.flush()
            elif isinstance(event, WarningEvent):
                if not self.quiet:
                    self.stream.write(f"\n⚠️  {event.message}\n" if self.verbose else f"⚠️  {event.message}\n")
            elif isinstance(event, CompleteEvent):
                if self.verbose:
                    state = "cancelled" if event.cancelled else "done"
                    self.stream.write(
                        f"\r  [{event.stage}] {state}: {event.processed_dirs} dirs, {event.total_files} files\n"
                    )
                    self.stream.flush()
            else:
                raise TypeError(f"Unknown event type: {type(event).__name__}")


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupscan",
            description="dupscan — concurrent duplicate file finder (read-only)",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            dest="roots",
            metavar="DIR",
            help="One or more directories to scan"
        )

        # Walk options
        parser.add_argument(
            "--exclude",
            nargs="+",
            default=[],
            type=str,
            metavar="TEXT",
            help="Skip every path containing this text (space separated)"
        )
        parser.add_argument(
            "--exclude-regex",
            nargs="+",
            default=[],
            type=str,
            metavar="RE",
            dest="exclude_regex",
            help="Skip every path matching this regular expression"
        )
        parser.add_argument(
            "--hidden",
            nargs="+",
            default=[],
            type=str,
            metavar="NAME",
            help="Folder names to skip wherever they appear (e.g. node_modules .git)"
        )
        parser.add_argument(
            "--follow-symlinks",
            action="store_true",
            dest="follow_symlinks",
            help="Follow symbolic links (cycles are detected)"
        )
        parser.add_argument(
            "--max-depth",
            type=int,
            default=None,
            metavar="N",
            dest="max_depth",
            help="Do not descend more than N levels below a root. 0 = root only"
        )

        # Candidate options
        parser.add_argument(
            "--min-size", "-m",
            default="0",
            type=str,
            metavar="SIZE",
            help="Minimum file size (e.g., 500KB, 1MB). Default: 0"
        )
        parser.add_argument(
            "--include-empty",
            action="store_true",
            dest="include_empty",
            help="Report zero-byte files as duplicates of each other"
        )

        # Detection options
        parser.add_argument(
            "--mode",
            choices=MODE_CHOICES,
            default="pruned",
            type=str,
            help=MODE_HELP_TEXT
        )
        parser.add_argument(
            "--algorithm",
            choices=ALGORITHM_CHOICES,
            default="sha256",
            type=str,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--sample-size",
            default="8K",
            type=str,
            metavar="SIZE",
            dest="sample_size",
            help="Head and tail window of the quick hash. Default: 8K"
        )
        parser.add_argument(
            "--large-file-threshold",
            default="2G",
            type=str,
            metavar="SIZE",
            dest="large_file_threshold",
            help="Files at or above this size are hashed in chunks. Default: 2G"
        )
        parser.add_argument(
            "--workers",
            type=int,
            default=None,
            metavar="N",
            help="Number of hashing threads. Default: CPU count"
        )

        # Output options
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the full scan report as JSON"
        )
        parser.add_argument(
            "--list-redundant",
            action="store_true",
            dest="list_redundant",
            help="Print only the redundant copies (all but one file per group), one per line"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress, statistics and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.json and args.list_redundant:
            self.error_exit("--json and --list-redundant cannot be used together")

        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")

        if args.max_depth is not None and args.max_depth < 0:
            self.error_exit("Maximum depth cannot be negative")

        if args.workers is not None and args.workers < 1:
            self.error_exit("Worker count must be at least 1")

        for name in ("min_size", "sample_size", "large_file_threshold"):
            value = getattr(args, name)
            if not ConvertUtils.is_valid_size_format(value):
                self.error_exit(f"Invalid size format for --{name.replace('_', '-')}: '{value}'")

        if args.mode not in MODE_ALIASES:
            self.error_exit(
                f"Invalid detection mode: '{args.mode}'.\n"
                f"Valid options: {', '.join(MODE_CHOICES)}"
            )

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            options = ScanOptions.from_strings(
                exclude=args.exclude,
                exclude_regex=args.exclude_regex,
                hidden_folders=args.hidden,
                follow_symlinks=args.follow_symlinks,
                max_depth=args.max_depth,
            )
            return ScanParams.from_human_readable(
                roots=[os.path.abspath(os.path.expanduser(r)) for r in args.roots],
                min_size_str=args.min_size,
                sample_size_str=args.sample_size,
                large_file_threshold_str=args.large_file_threshold,
                options=options,
                mode=MODE_ALIASES[args.mode],
                algorithm=args.algorithm,
                workers=args.workers,
                include_empty=args.include_empty,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def run_scan(self, params: ScanParams) -> ScanReport:
        """Execute the scan workflow."""
        command = ScanCommand()
        if self.verbose:
            print(f"Finding duplicates (mode: {params.mode.display_name}, "
                  f"algorithm: {params.algorithm})...", file=sys.stderr)

        sink = ConsoleProgressSink(verbose=self.verbose, quiet=self.quiet)
        try:
            report = command.execute(params, progress_sink=sink)
        except DupScanError as e:
            self.error_exit(str(e))

        if self.verbose:
            print("\n" + report.stats.print_summary(), file=sys.stderr)
        return report

    def output_results(self, report: ScanReport) -> None:
        """Output duplicate groups as plain text."""
        if self.quiet:
            return

        print(f"Scanned {report.files_scanned} files in {report.dirs_scanned} directories "
              f"({ConvertUtils.bytes_to_human(report.total_size)})")
        if report.warnings:
            print(f"Skipped entries with warnings: {report.warnings}")

        groups: List[DuplicateGroup] = report.groups
        if not groups:
            print("No duplicate groups found.")
            return

        print(f"\nFound {len(groups)} duplicate groups ({report.duplicate_files} files)")
        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.file_size)
            wasted_str = ConvertUtils.bytes_to_human(group.wasted_space)
            print(f"\n📁 Group {idx} | Size: {size_str} | Files: {group.file_count} | "
                  f"Wasted: {wasted_str} | {group.hexdigest[:16]}")
            for member in group.members:
                modified = ConvertUtils.timestamp_to_human(member.mtime)
                print(f"   {member.path} [modified {modified}]")

        total = DuplicateService.total_wasted_space(groups)
        print(f"\nTotal reclaimable space: {ConvertUtils.bytes_to_human(total)}")

    @staticmethod
    def output_json(report: ScanReport) -> None:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))

    @staticmethod
    def output_redundant(report: ScanReport) -> None:
        for path in DuplicateService.redundant_paths(report.groups):
            print(path)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet and not args.json and not args.list_redundant:
            print(f"Scanning: {', '.join(params.roots)}")

        report = self.run_scan(params)

        if args.json:
            self.output_json(report)
        elif args.list_redundant:
            self.output_redundant(report)
        else:
            self.output_results(report)

        if report.status == ScanStatus.CANCELLED:
            self.warning("Scan was cancelled; results are incomplete")

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run(argv)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
