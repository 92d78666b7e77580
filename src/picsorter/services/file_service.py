"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File operations for writing selected images into the output directory.
Provides collision-safe copy/move and the standalone single-image copy.
"""
import logging
import shutil
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from picsorter.core.errors import ConfigurationError, MaterializationError
from picsorter.core.models import IMAGE_EXTENSIONS, TransferMode

logger = logging.getLogger(__name__)


class FileService:
    """
    Filesystem primitives used by the output layer.
    Pre-existing files at the destination are never overwritten.
    """

    _clock_lock = threading.Lock()
    _last_timestamp = 0

    @classmethod
    def timestamp(cls) -> int:
        """Milliseconds since the epoch, never lower than a previously returned value."""
        with cls._clock_lock:
            now = int(time.time() * 1000)
            if now < cls._last_timestamp:
                now = cls._last_timestamp
            cls._last_timestamp = now
            return now

    @staticmethod
    def ensure_directory(directory: str) -> bool:
        """Creates `directory` (with parents) if needed. Returns True if it was created."""
        path = Path(directory)
        if path.is_dir():
            return False
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MaterializationError(f"Cannot create directory {directory}: {e}") from e
        logger.debug(f"Created directory: {directory}")
        return True

    @classmethod
    def resolve_destination(cls, source: str, destination_dir: str) -> Path:
        """
        Destination path for `source` inside `destination_dir`.
        Same base name if free, otherwise `<stem>_<timestamp><ext>`, then
        `<stem>_<timestamp>_<n><ext>` if that is taken too.
        """
        name = Path(source).name
        target = Path(destination_dir) / name
        if not target.exists():
            return target

        stem, suffix = target.stem, target.suffix
        stamp = cls.timestamp()
        candidate = target.with_name(f"{stem}_{stamp}{suffix}")
        counter = 1
        while candidate.exists():
            candidate = target.with_name(f"{stem}_{stamp}_{counter}{suffix}")
            counter += 1
        logger.debug(f"Collision rename: {name} -> {candidate.name}")
        return candidate

    @classmethod
    def transfer(cls, source: str, destination_dir: str,
                 mode: TransferMode = TransferMode.COPY) -> Path:
        """
        Copies or moves `source` into `destination_dir` and returns the final path.
        Raises MaterializationError on any filesystem failure.
        """
        src = Path(source)
        if not src.is_file():
            raise MaterializationError(f"Source file not found: {source}")

        cls.ensure_directory(destination_dir)
        target = cls.resolve_destination(source, destination_dir)

        try:
            if mode == TransferMode.MOVE:
                shutil.move(str(src), str(target))
            else:
                shutil.copy2(str(src), str(target))
        except (OSError, shutil.Error) as e:
            raise MaterializationError(f"Failed to {mode.value} {source} to {target}: {e}") from e

        return target

    @staticmethod
    def is_supported_image(file_path: str) -> bool:
        """True if the extension is one of the recognised image extensions."""
        return Path(file_path).suffix.lower() in IMAGE_EXTENSIONS

    @classmethod
    def copy_single_image(cls, source: str, destination_dir: str,
                          on_directory_created: Optional[Callable[[str], None]] = None) -> Path:
        """
        Standalone copy of one image, independent of any scan.

        Raises:
            ConfigurationError: Source missing, not a file, or not an image extension.
            MaterializationError: The copy itself failed.
        """
        if not source or not destination_dir:
            raise ConfigurationError("Both a source file and a destination directory are required")

        src = Path(source)
        if not src.exists():
            raise ConfigurationError(f'The file "{source}" does not exist.')
        if not src.is_file():
            raise ConfigurationError(f'"{source}" is not a regular file.')
        if not cls.is_supported_image(source):
            raise ConfigurationError(f'"{source}" does not appear to be a supported image file.')

        if cls.ensure_directory(destination_dir) and on_directory_created:
            on_directory_created(destination_dir)

        return cls.transfer(source, destination_dir, TransferMode.COPY)
