"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Defines core interfaces (Protocols) used throughout the sorting pipeline.
These protocols enforce structural typing using Python's `typing.Protocol` so the
pipeline stages can be swapped or stubbed in tests without inheritance.

Key Components:
---------------
- HashAlgorithm: Standardized interface for fixed-length digests (MD5, XXH3-128).
- ImageReducer: Decodes an image and returns its fixed-size grayscale sample.
- Fingerprinter: Turns an ImageFile into its fingerprint.
- FileScanner: Enumerates candidate image files under a root directory.
"""

from typing import Protocol, List, Optional, Callable
from picsorter.core.models import ImageFile


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different digest functions without affecting
    the grouping logic, as long as the output is deterministic.
    """

    @staticmethod
    def hash(data: bytes) -> bytes:
        """Computes the digest of the provided byte data."""
        ...


class ImageReducer(Protocol):
    """Interface for the decode → resize → grayscale → raw bytes primitive."""

    def reduce(self, path: str) -> bytes:
        """
        Returns the raw single-channel sample of the image at `path`.

        Raises:
            DecodeError: If the file cannot be decoded or resampled.
        """
        ...


class Fingerprinter(Protocol):
    """Interface for computing fingerprints of image files."""

    def compute(self, file: ImageFile) -> bytes:
        """
        Compute (and cache on the file) the fingerprint of one image.

        Raises:
            DecodeError: If the image cannot be reduced.
        """
        ...


class FileScanner(Protocol):
    """
    Interface for enumerating candidate image files.

    Methods:
        scan: Returns image files in enumeration order.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[ImageFile]:
        """
        Scan files from the configured directory.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            List of ImageFile with `order` set to their enumeration position.
        """
        ...
