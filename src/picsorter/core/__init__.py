"""
Core sorting engine: scanner, fingerprinting, index and selection policy.

This package contains the foundation of picsorter:
- ImageScannerImpl: directory traversal with image extension filter
- PillowReducerImpl + FingerprinterImpl: 16×16 grayscale sample hashed with a 128-bit digest
- FingerprintIndex + DuplicateIndexBuilder: exact-fingerprint grouping, optionally on a thread pool
- SelectionPolicy: which files are written to the output directory
- Models: ImageFile, DuplicateGroup, OutputAction, SortConfig, SortStats

No filesystem writes happen here; see picsorter.services for copy/move.
"""

from .errors import (
    PicSorterError, EnumerationError, DecodeError, MaterializationError, ConfigurationError)
from .models import (
    ImageFile, DuplicateGroup, OutputAction, MaterializationResult, FailedImage,
    SortConfig, SortStats, TransferMode, HashAlgorithmName, SelectionReason, IMAGE_EXTENSIONS)
from .scanner import ImageScannerImpl
from .hasher import (
    PillowReducerImpl, FingerprinterImpl, MD5AlgorithmImpl, XXHash128AlgorithmImpl, algorithm_for)
from .index import FingerprintIndex, DuplicateIndexBuilder, IndexResult
from .selector import SelectionPolicy

__all__ = [
    "PicSorterError",
    "EnumerationError",
    "DecodeError",
    "MaterializationError",
    "ConfigurationError",
    "ImageFile",
    "DuplicateGroup",
    "OutputAction",
    "MaterializationResult",
    "FailedImage",
    "SortConfig",
    "SortStats",
    "TransferMode",
    "HashAlgorithmName",
    "SelectionReason",
    "IMAGE_EXTENSIONS",
    "ImageScannerImpl",
    "PillowReducerImpl",
    "FingerprinterImpl",
    "MD5AlgorithmImpl",
    "XXHash128AlgorithmImpl",
    "algorithm_for",
    "FingerprintIndex",
    "DuplicateIndexBuilder",
    "IndexResult",
    "SelectionPolicy",
]
