"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements image fingerprinting: a Pillow-based reducer produces a fixed-size grayscale
sample, and a pluggable 128-bit digest turns that sample into the fingerprint.

The FingerprinterImpl class caches results in the ImageFile object.
"""

import hashlib
import logging

import xxhash
from PIL import Image

from picsorter.core.errors import DecodeError
from picsorter.core.interfaces import Fingerprinter, HashAlgorithm, ImageReducer
from picsorter.core.models import DEFAULT_GRID_SIZE, HashAlgorithmName, ImageFile

logger = logging.getLogger(__name__)

# Modes that resize and convert to "L" directly; everything else goes through RGB first
_DIRECT_MODES = ("L", "RGB")


# Use the same way to implement and use any other hashing algorithm
class MD5AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def hash(data: bytes) -> bytes:
        return hashlib.md5(data, usedforsecurity=False).digest()


class XXHash128AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def hash(data: bytes) -> bytes:
        return xxhash.xxh3_128(data).digest()


ALGORITHMS = {
    HashAlgorithmName.MD5: MD5AlgorithmImpl,
    HashAlgorithmName.XXH128: XXHash128AlgorithmImpl,
}


def algorithm_for(name: HashAlgorithmName) -> HashAlgorithm:
    """Returns the digest implementation registered for `name`."""
    try:
        return ALGORITHMS[name]()
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {name}")


class PillowReducerImpl(ImageReducer):
    """
    Decodes an image with Pillow and stretches it onto a grid_size × grid_size
    grayscale canvas. Aspect ratio is not preserved.
    """

    def __init__(self, grid_size: int = DEFAULT_GRID_SIZE):
        if grid_size < 1:
            raise ValueError("Grid size must be at least 1")
        self.grid_size = grid_size

    def reduce(self, path: str) -> bytes:
        try:
            with Image.open(path) as img:
                img.load()
                if img.mode not in _DIRECT_MODES:
                    img = img.convert("RGB")
                reduced = img.resize((self.grid_size, self.grid_size), Image.Resampling.LANCZOS)
                sample = reduced.convert("L").tobytes()
        except Exception as e:
            raise DecodeError(path, str(e) or type(e).__name__) from e

        expected = self.grid_size * self.grid_size
        if len(sample) != expected:
            raise DecodeError(path, f"unexpected sample length {len(sample)} (expected {expected})")
        return sample


class FingerprinterImpl(Fingerprinter):
    """
    A fingerprinter that supports any reducer and digest via the interfaces.
    Computes and caches the fingerprint on the ImageFile.
    """

    def __init__(self, reducer: ImageReducer = None, algorithm: HashAlgorithm = None):
        self.reducer = reducer or PillowReducerImpl()
        self.algorithm = algorithm or MD5AlgorithmImpl()

    def compute(self, file: ImageFile) -> bytes:
        if file.fingerprint is not None:
            return file.fingerprint
        sample = self.reducer.reduce(file.path)
        result = self.algorithm.hash(sample)
        file.fingerprint = result
        logger.debug(f"Fingerprint {result.hex()} for {file.path}")
        return result
