"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/output_service.py
Executes the OutputActions produced by the selection policy.
A failure on one action is recorded in its result and never stops the remaining actions.
"""
import logging
import os
from typing import Callable, List, Optional

from picsorter.core.errors import MaterializationError
from picsorter.core.models import MaterializationResult, OutputAction, TransferMode
from picsorter.services.file_service import FileService

logger = logging.getLogger(__name__)

STAGE_NAME = "Materializing"


class OutputService:
    """Copies or moves selected files into their destination directories."""

    def __init__(self, mode: TransferMode = TransferMode.COPY, file_service=FileService):
        self.mode = mode
        self.file_service = file_service

    def materialize_one(self, action: OutputAction) -> MaterializationResult:
        """Runs a single action; errors are captured in the returned result."""
        try:
            size = os.path.getsize(action.source)
        except OSError:
            size = 0

        try:
            target = self.file_service.transfer(action.source, action.destination_dir, self.mode)
        except MaterializationError as e:
            logger.warning(str(e))
            return MaterializationResult(action=action, error=str(e))

        logger.debug(f"{self.mode.display_name} {action.source} -> {target}")
        return MaterializationResult(action=action, destination=str(target), size=size)

    def materialize(
            self,
            actions: List[OutputAction],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> List[MaterializationResult]:
        """Runs all actions in order and returns one result per executed action."""
        results = []
        total = len(actions)
        for processed, action in enumerate(actions, 1):
            if stopped_flag and stopped_flag():
                logger.debug("Materialization interrupted by user")
                break
            results.append(self.materialize_one(action))
            if progress_callback:
                progress_callback(STAGE_NAME, processed, total)

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning(f"{failed} of {len(results)} files could not be written to the output")
        return results
