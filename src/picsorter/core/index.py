"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/index.py
Fingerprint index and the builder that fills it.

FingerprintIndex maps each fingerprint to the files that produced it, in enumeration order.
DuplicateIndexBuilder fingerprints files either sequentially or on a thread pool. In both
cases results are applied to the index by a single writer, sorted by enumeration position,
so the first member of every group is the lowest-ordered file.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from picsorter.core.errors import DecodeError
from picsorter.core.hasher import FingerprinterImpl
from picsorter.core.interfaces import Fingerprinter
from picsorter.core.models import DuplicateGroup, FailedImage, ImageFile

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10
STAGE_NAME = "Fingerprinting"


class FingerprintIndex:
    """
    Mapping fingerprint → ordered list of files.
    Every inserted file lives under exactly one key.
    """

    def __init__(self):
        self._entries: Dict[bytes, DuplicateGroup] = {}
        self._file_count = 0

    def add(self, file: ImageFile) -> DuplicateGroup:
        """Appends `file` under its fingerprint, opening a new entry if needed."""
        if file.fingerprint is None:
            raise ValueError(f"File has no fingerprint: {file.path}")
        entry = self._entries.get(file.fingerprint)
        if entry is None:
            entry = DuplicateGroup(fingerprint=file.fingerprint)
            self._entries[file.fingerprint] = entry
        entry.add_file(file)
        self._file_count += 1
        return entry

    def get(self, fingerprint: bytes) -> List[ImageFile]:
        entry = self._entries.get(fingerprint)
        return list(entry.files) if entry else []

    def duplicate_groups(self) -> List[DuplicateGroup]:
        """Entries with two or more files, in order of their first member."""
        return [entry for entry in self._entries.values() if entry.is_duplicate()]

    def unique_images(self) -> List[ImageFile]:
        """Files whose fingerprint no other file shares."""
        return [entry.files[0] for entry in self._entries.values() if entry.duplicate_count == 1]

    @property
    def file_count(self) -> int:
        return self._file_count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: bytes) -> bool:
        return fingerprint in self._entries

    def __iter__(self) -> Iterator[DuplicateGroup]:
        return iter(self._entries.values())


@dataclass
class IndexResult:
    """Outcome of fingerprinting one file list."""
    index: FingerprintIndex = field(default_factory=FingerprintIndex)
    failed: List[FailedImage] = field(default_factory=list)
    total: int = 0
    cancelled: bool = False
    duration: float = 0.0

    @property
    def processed(self) -> int:
        return self.index.file_count

    @property
    def duplicate_groups(self) -> List[DuplicateGroup]:
        return self.index.duplicate_groups()

    @property
    def unique_images(self) -> List[ImageFile]:
        return self.index.unique_images()


# (input position, file, fingerprint or None, error or None)
_Outcome = Tuple[int, ImageFile, Optional[bytes], Optional[str]]


class DuplicateIndexBuilder:
    """
    Fingerprints files and partitions them by fingerprint.
    Uses an injected Fingerprinter instance for flexibility and testability.
    """

    def __init__(self, fingerprinter: Fingerprinter = None, workers: int = 1):
        if workers < 1:
            raise ValueError("Worker count must be at least 1")
        self.fingerprinter = fingerprinter or FingerprinterImpl()
        self.workers = workers

    def build(
            self,
            files: List[ImageFile],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> IndexResult:
        """
        Fingerprint every file and build the index.
        Group membership is only final once all files have been processed;
        a cancelled build returns an empty result flagged as cancelled.
        """
        start_time = time.time()
        result = IndexResult(total=len(files))

        if stopped_flag and stopped_flag():
            result.cancelled = True
            return result

        if self.workers > 1 and len(files) > 1:
            outcomes = self._run_parallel(files, stopped_flag, progress_callback)
        else:
            outcomes = self._run_sequential(files, stopped_flag, progress_callback)

        if outcomes is None:
            logger.debug("Fingerprinting interrupted by user")
            result.cancelled = True
            result.duration = time.time() - start_time
            return result

        # Single writer: apply in enumeration order regardless of completion order
        for _, file, fingerprint, error in sorted(outcomes, key=lambda o: o[0]):
            if fingerprint is None:
                result.failed.append(FailedImage(file=file, reason=error or "unknown error"))
                continue
            result.index.add(file)

        result.duration = time.time() - start_time
        logger.debug(
            f"Indexed {result.processed}/{result.total} images into {len(result.index)} fingerprints "
            f"({len(result.failed)} failed) in {result.duration:.2f}s"
        )
        return result

    def _fingerprint(self, position: int, file: ImageFile) -> _Outcome:
        try:
            return position, file, self.fingerprinter.compute(file), None
        except DecodeError as e:
            logger.warning(f"Failed to process {file.path}: {e.reason}")
            return position, file, None, e.reason

    def _run_sequential(self, files, stopped_flag, progress_callback) -> Optional[List[_Outcome]]:
        outcomes = []
        total = len(files)
        for processed, file in enumerate(files, 1):
            if stopped_flag and stopped_flag():
                return None
            outcomes.append(self._fingerprint(processed - 1, file))
            self._report(progress_callback, processed, total)
        return outcomes

    def _run_parallel(self, files, stopped_flag, progress_callback) -> Optional[List[_Outcome]]:
        outcomes = []
        total = len(files)
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            futures = [executor.submit(self._fingerprint, pos, f) for pos, f in enumerate(files)]
            for processed, future in enumerate(as_completed(futures), 1):
                if stopped_flag and stopped_flag():
                    executor.shutdown(wait=False, cancel_futures=True)
                    return None
                outcomes.append(future.result())
                self._report(progress_callback, processed, total)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return outcomes

    @staticmethod
    def _report(progress_callback, processed: int, total: int) -> None:
        if progress_callback and (processed % PROGRESS_INTERVAL == 0 or processed == total):
            progress_callback(STAGE_NAME, processed, total)
