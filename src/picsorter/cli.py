#!/usr/bin/env python3
"""
PicSorter CLI: find duplicate images and copy/move a chosen selection into an output directory.
Runs the same core engine as the library API with console-based progress and reporting.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import re
import sys
import time
from pathlib import Path
from typing import NoReturn, Optional, Tuple

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import PIL
except ImportError:
    _MISSING_DEPS.append("Pillow")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    print("\nOr install the package with its dependencies:", file=sys.stderr)
    print("   pip install picsorter", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from picsorter.core.errors import ConfigurationError, EnumerationError, MaterializationError
from picsorter.core.models import DEFAULT_GRID_SIZE, SortConfig
from picsorter.commands import CopyCommand, SortCommand, SortReport
from picsorter.utils.convert_utils import ConvertUtils
from picsorter.aliases import (
    BANNER_TEXT, EPILOG_TEXT, HINT_TEXT,
    HASH_ALIASES, HASH_CHOICES, HASH_HELP_TEXT,
    TRANSFER_ALIASES, TRANSFER_CHOICES, TRANSFER_HELP_TEXT,
)

# SOURCE:DEST, each side optionally starting with a Windows drive letter
_COPY_ARGUMENT = re.compile(r"^((?:[A-Za-z]:)?[^:]+):((?:[A-Za-z]:)?[^:]+)$")

DEFAULT_INPUT_DIR = "./images"
DEFAULT_OUTPUT_DIR = "./duplicates"


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self._progress_stage: Optional[str] = None

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="picsorter",
            description=BANNER_TEXT,
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "input",
            nargs="?",
            default=DEFAULT_INPUT_DIR,
            help=f"Directory to scan for images. Default: {DEFAULT_INPUT_DIR}"
        )
        parser.add_argument(
            "output",
            nargs="?",
            default=DEFAULT_OUTPUT_DIR,
            help=f"Directory that receives selected images. Default: {DEFAULT_OUTPUT_DIR}"
        )

        # Selection modes
        parser.add_argument(
            "--move", "-m",
            action="store_true",
            help="Enable writing to the output directory. Alone, it copies every duplicate\n"
                 "except the first of each group"
        )
        parser.add_argument(
            "--select-one", "-s",
            action="store_true",
            help="Copy only the first image of every duplicate group"
        )
        parser.add_argument(
            "--copy-unique", "-u",
            action="store_true",
            help="Copy all images that have no duplicates"
        )
        parser.add_argument(
            "--select-all", "-a",
            action="store_true",
            help="Combine --select-one and --copy-unique (one image per group + all unique images)"
        )
        parser.add_argument(
            "--copy", "-c",
            type=str,
            metavar="SOURCE:DEST",
            help="Copy a single image into a directory and exit"
        )

        # Scanning options
        parser.add_argument(
            "--no-recursive",
            action="store_false",
            dest="recursive",
            help="Do not descend into subdirectories"
        )
        parser.add_argument(
            "--exclude", "-e",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            dest="excluded_dirs",
            help="Directories (space separated) to skip while scanning"
        )

        # Engine options
        parser.add_argument(
            "--transfer",
            choices=TRANSFER_CHOICES,
            default="copy",
            type=str,
            help=TRANSFER_HELP_TEXT
        )
        parser.add_argument(
            "--hash",
            choices=HASH_CHOICES,
            default="md5",
            type=str,
            dest="hash_algorithm",
            help=HASH_HELP_TEXT
        )
        parser.add_argument(
            "--grid-size",
            default=DEFAULT_GRID_SIZE,
            type=int,
            metavar='',
            help=f"Edge length of the grayscale sample grid. Default: {DEFAULT_GRID_SIZE}"
        )
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar='',
            help="Number of fingerprinting threads. Default: 1 (sequential)"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed logging and timing"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before a scan."""
        root_path = Path(args.input)
        if not root_path.exists():
            self.error_exit(f'The directory "{args.input}" does not exist.')
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")
        if args.grid_size < 1:
            self.error_exit("--grid-size must be at least 1")

        for excl_dir in args.excluded_dirs:
            excl_path = Path(excl_dir)
            if not excl_path.exists():
                self.warning(f"Excluded directory not found: {excl_dir}")
            elif not excl_path.is_dir():
                self.warning(f"Excluded path is not a directory: {excl_dir}")

    def create_config(self, args: argparse.Namespace) -> SortConfig:
        """Create a resolved SortConfig from CLI arguments."""
        try:
            return SortConfig.resolve(
                input_dir=args.input,
                output_dir=args.output,
                materialize=args.move,
                recursive=args.recursive,
                select_one=args.select_one,
                copy_unique=args.copy_unique,
                select_all=args.select_all,
                transfer_mode=TRANSFER_ALIASES[args.transfer],
                hash_algorithm=HASH_ALIASES[args.hash_algorithm],
                grid_size=args.grid_size,
                workers=args.workers,
                excluded_dirs=[str(Path(d.strip()).resolve()) for d in args.excluded_dirs],
            )
        except ConfigurationError as e:
            self.error_exit(f"Parameter error: {e}")

    @staticmethod
    def split_copy_argument(value: str) -> Tuple[str, str]:
        """Split a SOURCE:DEST argument. Raises ConfigurationError on a malformed value."""
        match = _COPY_ARGUMENT.match(value or "")
        if not match:
            raise ConfigurationError(
                f'Invalid format for --copy: "{value}". Use "source:destination"')
        return match.group(1), match.group(2)

    def run_copy(self, value: str) -> None:
        """Standalone copy mode; exits with status 1 on any failure."""
        try:
            source, destination = self.split_copy_argument(value)
            target = CopyCommand().execute(
                source, destination,
                on_directory_created=lambda d: self.info(f'Destination directory "{d}" was created.')
            )
        except (ConfigurationError, MaterializationError) as e:
            self.error_exit(str(e))
        self.info(f'Image was copied to "{target}".')

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress on stderr."""
        if self.quiet:
            return
        if stage == "Scanning" and not self.verbose:
            return

        if self._progress_stage and self._progress_stage != stage:
            sys.stderr.write("\n")
        self._progress_stage = stage

        if total and total > 0:
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({ConvertUtils.percent(current, total)}%)"
            )
        else:
            sys.stderr.write(f"\r  [{stage}] {current} images found...")
        sys.stderr.flush()

    def _end_progress(self) -> None:
        if self._progress_stage:
            sys.stderr.write("\n")
            sys.stderr.flush()
            self._progress_stage = None

    def run_sort(self, config: SortConfig) -> SortReport:
        """Execute the sorting workflow."""
        self.info(f"Searching for images in {config.input_dir}"
                  f"{' (including subdirectories)' if config.recursive else ''}...")
        try:
            report = SortCommand().execute(config, progress_callback=self.progress_callback)
        except (EnumerationError, MaterializationError) as e:
            self._end_progress()
            self.error_exit(str(e))
        self._end_progress()
        return report

    def output_results(self, report: SortReport) -> None:
        """Print groups, uniques, written files and the summary."""
        if self.quiet:
            return

        config = report.config
        print(f"{report.stats.total_images} images found.")
        if not report.files:
            print("No images found to process.")
            return

        print("\nResults:")
        for group in report.groups:
            print(f"\nDuplicate group {group.key_hex}:")
            if config.select_one or config.select_all:
                print(f"  Selected image: {group.representative.path}")
            for idx, file in enumerate(group.files, 1):
                print(f"  {idx}. {file.path}")

        if report.uniques:
            print(f"\nUnique images found: {len(report.uniques)}")

        if report.results:
            print(f"\nWriting {len(report.results)} files to {config.output_dir}...")
            verb = config.transfer_mode.display_name
            for result in report.results:
                if result.ok:
                    print(f"  {result.action.source} -> {verb} to {result.destination}")
                else:
                    print(f"  {result.action.source} -> Error: {result.error}")

        print()
        print(report.stats.print_summary())
        if report.stats.bytes_materialized:
            print(f"- {ConvertUtils.bytes_to_human(report.stats.bytes_materialized)} written")

        if not config.materialize:
            print(HINT_TEXT.rstrip())
            print(f"\nExample: picsorter {config.input_dir} ./selection --select-all")

    def info(self, message: str) -> None:
        if not self.quiet:
            print(message)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def configure_logging(self) -> None:
        package_logger = logging.getLogger("picsorter")
        if self.quiet:
            package_logger.setLevel(logging.ERROR)
        elif self.verbose:
            package_logger.setLevel(logging.INFO)
        else:
            package_logger.setLevel(logging.WARNING)

    def run(self, argv=None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging()

        if args.copy is not None:
            self.run_copy(args.copy)
            return

        self.info(BANNER_TEXT)
        self.info("-" * len(BANNER_TEXT))

        self.validate_args(args)
        config = self.create_config(args)

        report = self.run_sort(config)
        if report.cancelled:
            self.warning("Operation was interrupted; results are incomplete.")
            sys.exit(130)

        self.output_results(report)

        if self.verbose:
            print(f"\n✅ Completed in {time.time() - self.start_time:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
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
