"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for image scanning, fingerprint grouping and output selection.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from picsorter.core.errors import ConfigurationError

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff", ".tif")
DEFAULT_GRID_SIZE = 16


# =============================
# Enums
# =============================

class TransferMode(Enum):
    """How a selected file is placed into the output directory."""
    COPY = "copy"
    MOVE = "move"

    @property
    def display_name(self) -> str:
        """Past-tense verb used in per-file output lines."""
        mapping = {
            TransferMode.COPY: "Copied",
            TransferMode.MOVE: "Moved",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class HashAlgorithmName(Enum):
    """128-bit digests available for fingerprinting the reduced sample."""
    MD5 = "md5"
    XXH128 = "xxh128"

    @property
    def description(self) -> str:
        mapping = {
            HashAlgorithmName.MD5: "MD5 (hashlib), 128 bit",
            HashAlgorithmName.XXH128: "xxHash XXH3-128, 128 bit, faster",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class SelectionReason(str, Enum):
    REPRESENTATIVE = "representative"
    EXTRA = "extra"
    UNIQUE = "unique"


# ======================
#  Core Data Models
# ======================

@dataclass
class ImageFile:
    """
    A candidate image found by the scanner.
    Stores its enumeration position and the cached fingerprint once computed.
    """
    path: str
    order: int = 0  # position in enumeration order
    name: Optional[str] = None
    extension: Optional[str] = None
    fingerprint: Optional[bytes] = None

    def __post_init__(self):
        """Automatically extract basename and extension from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

        if self.extension is None:
            _, ext = os.path.splitext(self.name)
            self.extension = ext.lower()  # ".JPG" → ".jpg"

        if self.fingerprint is not None and not isinstance(self.fingerprint, bytes):
            raise ValueError("Fingerprint must be bytes or None")

    @property
    def is_supported(self) -> bool:
        return self.extension in IMAGE_EXTENSIONS

    def __repr__(self):
        return f"<ImageFile path={self.path}, order={self.order}>"


@dataclass
class DuplicateGroup:
    """
    Files sharing one fingerprint, kept in enumeration order.
    A group with a single file is a unique image, not a duplicate group.
    """
    fingerprint: bytes
    files: List[ImageFile] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def key_hex(self) -> str:
        return self.fingerprint.hex()

    @property
    def representative(self) -> ImageFile:
        """First-enumerated member."""
        if not self.files:
            raise ValueError("Empty group has no representative")
        return self.files[0]

    @property
    def extras(self) -> List[ImageFile]:
        """All members except the representative."""
        return self.files[1:]

    def add_file(self, file: ImageFile) -> None:
        if file.fingerprint != self.fingerprint:
            raise ValueError("Cannot add file with different fingerprint to a group.")
        self.files.append(file)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup fingerprint={self.key_hex}, count={len(self.files)}>"


@dataclass(frozen=True)
class OutputAction:
    """One pending materialization: put `source` into `destination_dir`."""
    source: str
    destination_dir: str
    reason: SelectionReason = SelectionReason.REPRESENTATIVE


@dataclass
class MaterializationResult:
    action: OutputAction
    destination: Optional[str] = None
    error: Optional[str] = None
    size: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.destination is not None


@dataclass
class FailedImage:
    """A file that could not be fingerprinted."""
    file: ImageFile
    reason: str


@dataclass
class SortStats:
    """
    Counters collected during one sorting run.
    """
    total_images: int = 0
    processed: int = 0
    failed: int = 0
    duplicate_count: int = 0
    group_count: int = 0
    unique_count: int = 0
    selected: int = 0
    materialized: int = 0
    materialize_failed: int = 0
    bytes_materialized: int = 0
    total_time: float = 0.0

    def print_summary(self) -> str:
        lines = [
            "Summary:",
            f"- {self.total_images} images in total",
            f"- {self.duplicate_count} duplicates in {self.group_count} groups",
            f"- {self.unique_count} unique images",
        ]
        if self.failed:
            lines.append(f"- {self.failed} images could not be processed")
        if self.selected:
            lines.append(f"- {self.materialized}/{self.selected} selected images written to output")
        if self.materialize_failed:
            lines.append(f"- {self.materialize_failed} files failed to copy/move")
        return "\n".join(lines)


"""
Resolved run configuration with built-in validation.
Interface-agnostic; used by the CLI and by library callers.
"""

@dataclass(frozen=True)
class SortConfig:
    """Immutable, fully resolved configuration for one sorting run."""
    input_dir: str
    output_dir: str
    materialize: bool = False
    recursive: bool = True
    select_one: bool = False
    copy_unique: bool = False
    select_all: bool = False
    transfer_mode: TransferMode = TransferMode.COPY
    hash_algorithm: HashAlgorithmName = HashAlgorithmName.MD5
    grid_size: int = DEFAULT_GRID_SIZE
    workers: int = 1
    excluded_dirs: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.input_dir:
            raise ConfigurationError("Input directory cannot be empty")

        if not self.output_dir:
            raise ConfigurationError("Output directory cannot be empty")

        if self.select_all and not (self.select_one and self.copy_unique):
            raise ConfigurationError("select_all requires select_one and copy_unique")

        if (self.select_one or self.copy_unique) and not self.materialize:
            raise ConfigurationError("select_one/copy_unique require materialization to be enabled")

        if self.grid_size < 1:
            raise ConfigurationError("Grid size must be at least 1")

        if self.workers < 1:
            raise ConfigurationError("Worker count must be at least 1")

    @staticmethod
    def resolve(
            input_dir: str,
            output_dir: str,
            materialize: bool = False,
            recursive: bool = True,
            select_one: bool = False,
            copy_unique: bool = False,
            select_all: bool = False,
            transfer_mode: TransferMode = TransferMode.COPY,
            hash_algorithm: HashAlgorithmName = HashAlgorithmName.MD5,
            grid_size: int = DEFAULT_GRID_SIZE,
            workers: int = 1,
            excluded_dirs: Optional[List[str]] = None,
    ) -> 'SortConfig':
        """
        Factory that applies the flag coupling rules before construction:
        select_all turns on select_one and copy_unique, and any selection mode
        turns on materialization.
        """
        if select_all:
            select_one = True
            copy_unique = True
        if select_one or copy_unique:
            materialize = True

        return SortConfig(
            input_dir=input_dir,
            output_dir=output_dir,
            materialize=materialize,
            recursive=recursive,
            select_one=select_one,
            copy_unique=copy_unique,
            select_all=select_all,
            transfer_mode=transfer_mode,
            hash_algorithm=hash_algorithm,
            grid_size=grid_size,
            workers=workers,
            excluded_dirs=tuple(excluded_dirs or ()),
        )
