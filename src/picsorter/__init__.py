"""
PicSorter: exact duplicate image finder with selective copy/move.

Core features:
- Fingerprint: every image is stretched onto a 16×16 grayscale grid and hashed (MD5 or XXH3-128)
- Exact grouping: images with equal fingerprints are duplicates, regardless of format or resolution
- Selection modes: extras of each group, one per group, unique images, or one per group + uniques
- Collision-safe copy/move into an output directory (existing files are never overwritten)
- CLI interface for headless usage
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("picsorter")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli
    from pathlib import Path as _Path

    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from picsorter.commands import SortCommand, CopyCommand, SortReport
from picsorter.core import (
    SortConfig, SortStats, ImageFile, DuplicateGroup, OutputAction, TransferMode, HashAlgorithmName,
    PicSorterError, EnumerationError, DecodeError, MaterializationError, ConfigurationError)
from picsorter.services import FileService, OutputService

__all__ = [
    "SortCommand",
    "CopyCommand",
    "SortReport",
    "SortConfig",
    "SortStats",
    "ImageFile",
    "DuplicateGroup",
    "OutputAction",
    "TransferMode",
    "HashAlgorithmName",
    "PicSorterError",
    "EnumerationError",
    "DecodeError",
    "MaterializationError",
    "ConfigurationError",
    "FileService",
    "OutputService",
    "__version__",
]
