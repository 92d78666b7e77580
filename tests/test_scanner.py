"""
Unit tests for ImageScannerImpl.
Verifies image discovery, recursion, ordering, exclusions and error handling.
"""
import os
import sys
import pytest
from pathlib import Path

from picsorter.core.errors import EnumerationError
from picsorter.core.scanner import ImageScannerImpl


class TestImageScannerImpl:
    """Test enumeration with extension filter and recursion control."""

    def test_finds_only_image_extensions(self, test_images, temp_dir):
        files = ImageScannerImpl(str(temp_dir)).scan()
        names = [f.name for f in files]

        # notes.txt is ignored, broken.jpg is still a candidate (fails later)
        assert names == ["a.jpg", "b.jpg", "broken.jpg", "c.jpg"]

    def test_enumeration_order_is_tagged(self, test_images, temp_dir):
        files = ImageScannerImpl(str(temp_dir)).scan()
        assert [f.order for f in files] == list(range(len(files)))

    def test_extension_match_is_case_insensitive(self, temp_dir, image_factory):
        image_factory("UPPER.JPG", seed=1)
        image_factory("Mixed.Png", seed=2)
        (temp_dir / "scan.TIF").write_bytes(b"x")

        names = {f.name for f in ImageScannerImpl(str(temp_dir)).scan()}
        assert names == {"UPPER.JPG", "Mixed.Png", "scan.TIF"}

    def test_all_supported_extensions(self, temp_dir):
        for ext in (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff", ".tif", ".heic", ".svg"):
            (temp_dir / f"file{ext}").write_bytes(b"x")

        found = {f.extension for f in ImageScannerImpl(str(temp_dir)).scan()}
        assert found == {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff", ".tif"}

    def test_scans_subdirectories_recursively(self, nested_images, temp_dir):
        files = ImageScannerImpl(str(temp_dir), recursive=True).scan()
        paths = [f.path for f in files]

        # Files of a directory come before its subdirectories, names sorted
        assert paths == [
            str(nested_images["top"]),
            str(nested_images["deep"]),
            str(nested_images["other"]),
        ]

    def test_non_recursive_scan_stays_at_top_level(self, nested_images, temp_dir):
        files = ImageScannerImpl(str(temp_dir), recursive=False).scan()
        assert [f.path for f in files] == [str(nested_images["top"])]

    def test_excluded_directories_are_skipped(self, nested_images, temp_dir):
        scanner = ImageScannerImpl(str(temp_dir), excluded_dirs=[str(temp_dir / "sub")])
        files = scanner.scan()
        assert [f.name for f in files] == ["top.png"]

    def test_empty_directory_returns_empty_list(self, temp_dir):
        assert ImageScannerImpl(str(temp_dir)).scan() == []

    def test_missing_root_raises(self, temp_dir):
        with pytest.raises(EnumerationError, match="does not exist"):
            ImageScannerImpl(str(temp_dir / "missing")).scan()

    def test_file_as_root_raises(self, test_images):
        with pytest.raises(EnumerationError, match="Not a directory"):
            ImageScannerImpl(str(test_images["a"])).scan()

    def test_directory_named_like_image_is_not_a_file(self, temp_dir):
        (temp_dir / "album.jpg").mkdir()
        assert ImageScannerImpl(str(temp_dir)).scan() == []

    @pytest.mark.skipif(sys.platform == "win32", reason="Symlinks need privileges on Windows")
    def test_symlinks_are_skipped(self, temp_dir, image_factory):
        real = image_factory("real.png", seed=1)
        os.symlink(real, temp_dir / "link.png")

        assert [f.name for f in ImageScannerImpl(str(temp_dir)).scan()] == ["real.png"]

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="Permission bits are not enforced for root or on Windows"
    )
    def test_unreadable_subdirectory_is_skipped(self, temp_dir, image_factory):
        image_factory("ok.png", seed=1)
        locked = temp_dir / "locked"
        image_factory("hidden.png", seed=2, subdir="locked")
        locked.chmod(0o000)
        try:
            files = ImageScannerImpl(str(temp_dir)).scan()
        finally:
            locked.chmod(0o755)

        assert [f.name for f in files] == ["ok.png"]

    def test_stopped_flag_returns_empty(self, test_images, temp_dir):
        assert ImageScannerImpl(str(temp_dir)).scan(stopped_flag=lambda: True) == []

    def test_progress_callback_reports_found_count(self, test_images, temp_dir):
        calls = []
        ImageScannerImpl(str(temp_dir)).scan(progress_callback=lambda *a: calls.append(a))

        assert calls
        stage, current, total = calls[-1]
        assert stage == "Scanning"
        assert current == 4
        assert total is None
