"""
Unified command orchestrator for image sorting.
This is the single source of truth for the workflow, used by the CLI and library callers.
"""
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from picsorter.core.hasher import FingerprinterImpl, PillowReducerImpl, algorithm_for
from picsorter.core.index import DuplicateIndexBuilder, IndexResult
from picsorter.core.models import (
    DuplicateGroup, ImageFile, MaterializationResult, OutputAction, SortConfig, SortStats)
from picsorter.core.scanner import ImageScannerImpl
from picsorter.core.selector import SelectionPolicy
from picsorter.services.file_service import FileService
from picsorter.services.output_service import OutputService

logger = logging.getLogger(__name__)


@dataclass
class SortReport:
    """Everything one run produced: inputs, classification, actions and their results."""
    config: SortConfig
    files: List[ImageFile] = field(default_factory=list)
    index_result: IndexResult = field(default_factory=IndexResult)
    groups: List[DuplicateGroup] = field(default_factory=list)
    uniques: List[ImageFile] = field(default_factory=list)
    actions: List[OutputAction] = field(default_factory=list)
    results: List[MaterializationResult] = field(default_factory=list)
    stats: SortStats = field(default_factory=SortStats)
    output_dir_created: bool = False
    cancelled: bool = False


class SortCommand:
    """
    Orchestrates the entire sorting workflow:
    1. Enumerate candidate images under the input directory
    2. Fingerprint them and build the duplicate index
    3. Apply the selection policy
    4. Copy/move the selected files into the output directory

    Usage:
        config = SortConfig.resolve("./photos", "./picked", select_all=True)
        report = SortCommand().execute(
            config,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
    """

    def __init__(self, file_service=FileService):
        self.file_service = file_service

    def build_scanner(self, config: SortConfig) -> ImageScannerImpl:
        excluded = list(config.excluded_dirs)
        # Keep previous output out of the scan when it lives below the input root
        if config.materialize and self._is_inside(config.output_dir, config.input_dir):
            excluded.append(config.output_dir)
        return ImageScannerImpl(
            root_dir=config.input_dir,
            recursive=config.recursive,
            excluded_dirs=excluded
        )

    @staticmethod
    def build_index_builder(config: SortConfig) -> DuplicateIndexBuilder:
        fingerprinter = FingerprinterImpl(
            reducer=PillowReducerImpl(config.grid_size),
            algorithm=algorithm_for(config.hash_algorithm)
        )
        return DuplicateIndexBuilder(fingerprinter, workers=config.workers)

    def execute(
            self,
            config: SortConfig,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> SortReport:
        """
        Execute one sorting run.

        Args:
            config: Resolved configuration
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            SortReport with classification, actions, results and statistics

        Raises:
            EnumerationError: If the input directory is missing or not a directory
            MaterializationError: If the output directory cannot be created
        """
        start_time = time.time()
        report = SortReport(config=config)

        # Step 1: Enumerate
        report.files = self.build_scanner(config).scan(
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        report.stats.total_images = len(report.files)
        logger.info(f"{len(report.files)} images found in {config.input_dir}")

        if config.materialize:
            report.output_dir_created = self.file_service.ensure_directory(config.output_dir)

        # Step 2: Fingerprint + index
        report.index_result = self.build_index_builder(config).build(
            report.files,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        if report.index_result.cancelled:
            report.cancelled = True
            report.stats.total_time = time.time() - start_time
            return report

        report.groups = report.index_result.duplicate_groups
        report.uniques = report.index_result.unique_images

        # Step 3: Select
        report.actions = SelectionPolicy(config).plan(report.groups, report.uniques)

        # Step 4: Materialize
        if report.actions:
            output = OutputService(config.transfer_mode, self.file_service)
            report.results = output.materialize(
                report.actions,
                stopped_flag=stopped_flag,
                progress_callback=progress_callback
            )
            report.cancelled = len(report.results) < len(report.actions)

        self._update_stats(report)
        report.stats.total_time = time.time() - start_time
        return report

    @staticmethod
    def _update_stats(report: SortReport) -> None:
        stats = report.stats
        stats.processed = report.index_result.processed
        stats.failed = len(report.index_result.failed)
        stats.group_count = len(report.groups)
        stats.duplicate_count = sum(len(g.files) - 1 for g in report.groups)
        stats.unique_count = len(report.uniques)
        stats.selected = len(report.actions)
        stats.materialized = sum(1 for r in report.results if r.ok)
        stats.materialize_failed = sum(1 for r in report.results if not r.ok)
        stats.bytes_materialized = sum(r.size for r in report.results if r.ok)

    @staticmethod
    def _is_inside(path: str, root: str) -> bool:
        """True if `path` is a strict descendant of `root`; the root itself does not count."""
        resolved, resolved_root = Path(path).resolve(), Path(root).resolve()
        if resolved == resolved_root:
            return False
        try:
            resolved.relative_to(resolved_root)
            return True
        except ValueError:
            return False


class CopyCommand:
    """Standalone copy of a single image, bypassing scan and index."""

    def __init__(self, file_service=FileService):
        self.file_service = file_service

    def execute(self, source: str, destination_dir: str,
                on_directory_created: Optional[Callable[[str], None]] = None) -> Path:
        """
        Raises:
            ConfigurationError: Invalid source (missing, not a file, not an image)
            MaterializationError: Copy failed
        """
        return self.file_service.copy_single_image(
            source, destination_dir, on_directory_created=on_directory_created)
