"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements image file enumeration.
Features:
- Uses os.walk for traversal and pathlib.Path for path handling
- Optional recursion into subdirectories
- Case-insensitive image extension filter
- Reproducible order: names sorted within each directory, files before subdirectories
- Returns a List of ImageFile tagged with their enumeration position
"""

import os
import sys
import time
import logging
from pathlib import Path
from typing import List, Optional, Callable, Iterable

from picsorter.core.errors import EnumerationError
from picsorter.core.interfaces import FileScanner
from picsorter.core.models import ImageFile, IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)


class ImageScannerImpl(FileScanner):
    """
    Scans a directory for image files.

    Attributes:
        root_dir: Root directory to scan
        recursive: Whether subdirectories are entered
        extensions: Allowed file extensions (lowercase, with leading dot)
        excluded_dirs: Directories that are never entered
    """

    def __init__(
        self,
        root_dir: str,
        recursive: bool = True,
        extensions: Optional[Iterable[str]] = None,
        excluded_dirs: Optional[Iterable[str]] = None
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.extensions = tuple(ext.lower() for ext in (extensions or IMAGE_EXTENSIONS))
        self.excluded_dirs = [str(Path(d).resolve()) for d in excluded_dirs] if excluded_dirs else []

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[ImageFile]:
        """
        Single-pass scan. Returns matching files in enumeration order.
        Unreadable subdirectories are logged and skipped.
        """
        logger.debug(f"Scanning {self.root_dir} (recursive={self.recursive})")

        root_path = Path(self.root_dir)
        if not root_path.exists():
            error_msg = f"Directory does not exist: {self.root_dir}"
            logger.error(error_msg)
            raise EnumerationError(error_msg)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {self.root_dir}"
            logger.error(error_msg)
            raise EnumerationError(error_msg)

        if stopped_flag and stopped_flag():
            logger.debug("Scan cancelled before start")
            return []

        found_files: List[ImageFile] = []
        start_time = time.time()

        for root, dirs, files in os.walk(str(root_path), onerror=self._on_walk_error):
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return []

            if self.recursive:
                dirs[:] = sorted(d for d in dirs if self._prefilter_dirs(Path(root) / d))
            else:
                dirs[:] = []

            for filename in sorted(files):
                path = Path(root) / filename
                if not self._accept_file(path):
                    continue
                found_files.append(ImageFile(path=str(path), order=len(found_files)))

            if progress_callback:
                progress_callback("Scanning", len(found_files), None)

        logger.debug(f"Scan completed in {time.time() - start_time:.2f}s, "
                     f"found {len(found_files)} images")
        return found_files

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror or error}")

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error.
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                if ".local/share/Trash" in path_str or "/.trash/" in path_str:
                    return True

            return False
        except (OSError, ValueError):
            return False

    def _is_excluded_directory(self, path: Path) -> bool:
        """Check if path is within an excluded directory."""
        try:
            path_str = str(path.resolve(strict=False))
            for excluded_dir in self.excluded_dirs:
                normalized_excluded = os.path.normpath(excluded_dir)
                if path_str.startswith(normalized_excluded + os.sep) or \
                        path_str == normalized_excluded:
                    return True
            return False
        except (OSError, ValueError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Skip trash, excluded, symlinked and inaccessible directories."""
        if self._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        if self.excluded_dirs and self._is_excluded_directory(path):
            logger.debug(f"Skipping excluded directory: {path}")
            return False

        try:
            if path.is_symlink():
                logger.debug(f"Skipping symlinked directory: {path}")
                return False
            if not os.access(path, os.R_OK | os.X_OK):
                logger.warning(f"Skipping inaccessible directory: {path}")
                return False
            return path.is_dir()
        except OSError as e:
            logger.warning(f"Skipping directory {path}: {e}")
            return False

    def _accept_file(self, path: Path) -> bool:
        """True if `path` is a regular, non-symlink file with an image extension."""
        if path.suffix.lower() not in self.extensions:
            return False

        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return False
            if not path.is_file():
                return False
        except OSError as e:
            logger.warning(f"Cannot access {path}: {e}")
            return False

        logger.debug(f"Accepted image: {path.name}")
        return True
