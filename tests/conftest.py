"""
Shared fixtures for picsorter tests.
Creates isolated temporary directories with controlled test images.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

from PIL import Image

# Add src/ to sys.path so 'picsorter' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


def make_pattern_image(seed: int, size=(40, 30)) -> Image.Image:
    """Deterministic RGB test image; different seeds give visibly different content."""
    width, height = size
    img = Image.new("RGB", size)
    img.putdata([
        ((x * 7 + seed * 31) % 256, (y * 11 + seed * 17) % 256, ((x + y) * seed * 5) % 256)
        for y in range(height) for x in range(width)
    ])
    return img


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def image_factory(temp_dir):
    """Saves pattern images: image_factory("a.jpg", seed=1, subdir="x")."""
    def _make(name: str, seed: int = 1, subdir: str = "", size=(40, 30)) -> Path:
        directory = temp_dir / subdir if subdir else temp_dir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        make_pattern_image(seed, size).save(path)
        return path
    return _make


@pytest.fixture
def test_images(temp_dir, image_factory) -> Dict[str, Path]:
    """
    Controlled input directory:
    - a.jpg and b.jpg: identical content (one duplicate group)
    - c.jpg: different content (unique)
    - broken.jpg: not an image (fingerprinting fails)
    - notes.txt: ignored by the scanner (wrong extension)
    """
    files = {
        "a": image_factory("a.jpg", seed=1),
        "b": image_factory("b.jpg", seed=1),
        "c": image_factory("c.jpg", seed=2),
    }

    files["broken"] = temp_dir / "broken.jpg"
    files["broken"].write_bytes(b"this is not a jpeg")

    files["text"] = temp_dir / "notes.txt"
    files["text"].write_text("not an image")

    return files


@pytest.fixture
def nested_images(temp_dir, image_factory) -> Dict[str, Path]:
    """
    Nested layout:
    - top.png (seed 3) at root
    - sub/deep.png duplicate of top.png
    - sub/other.png unique
    """
    return {
        "top": image_factory("top.png", seed=3),
        "deep": image_factory("deep.png", seed=3, subdir="sub"),
        "other": image_factory("other.png", seed=4, subdir="sub"),
    }
