#!/usr/bin/env python3
"""
rupes CLI: find groups of byte-for-byte identical files in a directory.
Read-only: files are reported, never modified or deleted.

Exit codes:
    0   run completed (duplicates or not)
    1   invalid directory/arguments or unexpected error
    2   command line usage error (argparse)
    3   run completed but some files could not be checked
    130 run cancelled with Ctrl+C (partial results are still printed)
"""
from __future__ import annotations
import argparse
import logging
import os
import signal
import sys
import threading
import time
from typing import List, NoReturn, Optional, Tuple

from rupes import __version__
from rupes.aliases import ALGORITHM_ALIASES, ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, EPILOG_TEXT
from rupes.commands import DetectionCommand
from rupes.core.exceptions import TraversalError
from rupes.core.models import DetectionResult, HashAlgorithm, ProgressSnapshot, ScanParams, Stage
from rupes.utils.convert_utils import ConvertUtils

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 3
EXIT_CANCELLED = 130


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.quiet: bool = False
        self.stop_event = threading.Event()

    @staticmethod
    def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="rupes",
            description="Determine groups of duplicate files (matching size and content hash) in a directory",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "directory",
            nargs="?",
            default="./",
            help="Directory to scan for duplicates. Default: ./"
        )

        # Traversal options
        parser.add_argument(
            "--recursive", "-r",
            action="store_true",
            help="Recursively search directory"
        )
        parser.add_argument(
            "--exclude-dots", "-e",
            action="store_true",
            help="Exclude files and directories that begin with '.'"
        )
        parser.add_argument(
            "--filter", "-f",
            default=None,
            metavar="REGEX",
            help="Only files with names matching this pattern will be included"
        )
        parser.add_argument(
            "--follow-symlinks", "-l",
            action="store_true",
            help="Follow symlinks, by default symbolic links are ignored"
        )
        parser.add_argument(
            "--max", "-M",
            default=None,
            metavar="SIZE",
            help="Maximum file size (e.g., 1024, 500KB, 1.5M); larger files are skipped"
        )
        parser.add_argument(
            "--min", "-m",
            default=None,
            metavar="SIZE",
            help="Minimum file size (e.g., 1024, 500KB, 1.5M); smaller files are skipped"
        )

        # Hashing options
        parser.add_argument(
            "--md5", "-5",
            action="store_true",
            help="Use MD5 instead of SHA-256, speeds up detection but increases risk of collision drastically"
        )
        parser.add_argument(
            "--algorithm", "-a",
            choices=ALGORITHM_CHOICES,
            default=None,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--jobs", "-j",
            type=int,
            default=None,
            metavar="N",
            help="Number of hashing threads. Default: number of CPUs"
        )
        parser.add_argument(
            "--chunk-size", "-c",
            default=None,
            metavar="SIZE",
            help="Bytes read per call while hashing (e.g., 64K, 1M). Default: 1M"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Hide progress information"
        )
        parser.add_argument(
            "--separator", "-1",
            default="\n",
            metavar="STR",
            help="String to separate duplicate file paths with. Default: newline"
        )
        parser.add_argument(
            "--time", "-t",
            action="store_true",
            help="Show total execution time"
        )
        parser.add_argument(
            "--size", "-s",
            action="store_true",
            help="Display the amount of space wasted by each group of duplicate files"
        )
        parser.add_argument(
            "--total-size", "-S",
            action="store_true",
            help="Display the total amount of space wasted by duplicate files"
        )
        parser.add_argument(
            "--details", "-d",
            action="store_true",
            help="Display all details, equivalent of -sSt"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Log every decision made while scanning and hashing"
        )
        parser.add_argument(
            "--version", "-V",
            action="store_true",
            help="Print rupes version"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if not os.path.isdir(args.directory):
            self.error_exit("Please specify a valid directory to search")

        if args.md5 and args.algorithm and args.algorithm != "md5":
            self.error_exit("--md5 cannot be combined with --algorithm other than md5")

        if args.jobs is not None and args.jobs < 1:
            self.error_exit("--jobs must be at least 1")

        for option in ("min", "max", "chunk_size"):
            value = getattr(args, option)
            if value is not None and not ConvertUtils.is_valid_size_format(value):
                self.error_exit(f"Invalid size format for --{option.replace('_', '-')}: {value}")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        if args.md5:
            algorithm = HashAlgorithm.MD5
        else:
            algorithm = ALGORITHM_ALIASES.get(args.algorithm, HashAlgorithm.SHA256)

        try:
            return ScanParams.from_human_readable(
                root_dir=args.directory,
                min_size_str=args.min,
                max_size_str=args.max,
                chunk_size_str=args.chunk_size,
                recursive=args.recursive,
                exclude_dots=args.exclude_dots,
                name_filter=args.filter,
                follow_symlinks=args.follow_symlinks,
                algorithm=algorithm,
                max_workers=args.jobs,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: Stage, snapshot: ProgressSnapshot) -> None:
        """Single-line progress on stderr."""
        if stage == Stage.SIZING:
            line = f"[1/2] {stage.value}: {snapshot.files_considered} files"
        else:
            line = (
                f"[2/2] {stage.value}: {snapshot.files_hashed} files, "
                f"{ConvertUtils.bytes_to_decimal(snapshot.bytes_hashed)}"
            )
        sys.stderr.write(f"\r\033[K{line}")
        sys.stderr.flush()

    def stopped_flag(self) -> bool:
        """True once the user pressed Ctrl+C."""
        return self.stop_event.is_set()

    def _handle_sigint(self, signum, frame) -> None:
        if self.stop_event.is_set():
            raise KeyboardInterrupt
        self.stop_event.set()

    def run_detection(
            self, params: ScanParams, show_progress: bool
    ) -> Tuple[DetectionResult, List[TraversalError]]:
        """Execute the detection workflow with Ctrl+C mapped to cooperative cancellation."""
        command = DetectionCommand()
        previous_handler = None
        if threading.current_thread() is threading.main_thread():
            previous_handler = signal.signal(signal.SIGINT, self._handle_sigint)

        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if show_progress else None,
                stopped_flag=self.stopped_flag
            )
        except TraversalError as e:
            self.error_exit(str(e))
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)
            if show_progress:
                sys.stderr.write("\r\033[K")
                sys.stderr.flush()

        return result, command.get_traversal_errors()

    def output_results(self, result: DetectionResult, args: argparse.Namespace) -> None:
        """Print groups in the plain format: paths joined by the separator, blank line after each group."""
        show_size = args.size or args.details
        show_total = args.total_size or args.details
        show_time = args.time or args.details

        print()
        if not result.groups and not result.is_cancelled:
            print("No duplicates found")
            print()

        for group in result.groups:
            print(args.separator.join(group.paths))
            if show_size:
                print(f"^ {ConvertUtils.bytes_to_decimal(group.wasted_bytes)} of wasted space")
            print()

        if show_time:
            elapsed = time.time() - self.start_time
            print(f"Took {ConvertUtils.seconds_to_human(elapsed)} to complete")
        if show_total:
            print(f"{ConvertUtils.bytes_to_decimal(result.total_wasted_bytes)} total wasted space")

    def report_problems(self, result: DetectionResult, traversal_errors: List[TraversalError]) -> None:
        """List files that could not be checked on stderr."""
        for error in traversal_errors:
            print(f"Warning: skipped {error}", file=sys.stderr)

        if result.failures:
            print(f"Warning: {len(result.failures)} file(s) could not be checked:", file=sys.stderr)
            for failure in result.failures:
                print(f"  {failure}", file=sys.stderr)

        if result.is_cancelled:
            print("Run cancelled, results are incomplete", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = EXIT_ERROR) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)

        if args.version:
            print(f"rupes version {__version__}")
            return EXIT_OK

        if args.verbose:
            logging.getLogger("rupes").setLevel(logging.DEBUG)

        self.quiet = args.quiet
        self.validate_args(args)
        params = self.create_params(args)
        logger.debug(f"Running with {params}")

        show_progress = not self.quiet and sys.stderr.isatty()
        result, traversal_errors = self.run_detection(params, show_progress)

        if result.progress.files_considered == 0 and not result.is_cancelled:
            print("No files to scan, rupes will now exit")
            self.report_problems(result, traversal_errors)
            return EXIT_OK

        self.output_results(result, args)
        self.report_problems(result, traversal_errors)

        if result.is_cancelled:
            return EXIT_CANCELLED
        if result.has_failures:
            return EXIT_PARTIAL
        return EXIT_OK


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        code = app.run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(EXIT_CANCELLED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    sys.exit(code)


if __name__ == "__main__":
    main()
