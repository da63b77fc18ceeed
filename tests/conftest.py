"""Pytest configuration and shared fixtures."""

import io
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image, ImageDraw

from snapcompare.models.options import ComparisonOptions
from snapcompare.models.pixel_grid import PixelGrid


# ============================================================================
# Image Helpers
# ============================================================================


def make_image(
    width: int,
    height: int,
    color: tuple[int, int, int, int] = (128, 128, 128, 255),
) -> Image.Image:
    return Image.new("RGBA", (width, height), color)


def encode(img: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    if fmt == "JPEG":
        img = img.convert("RGB")
    img.save(buf, format=fmt, **({"quality": 95} if fmt == "JPEG" else {}))
    return buf.getvalue()


def grid_from_image(img: Image.Image) -> PixelGrid:
    rgba = img.convert("RGBA")
    return PixelGrid(rgba.width, rgba.height, bytearray(rgba.tobytes()))


def with_block(
    img: Image.Image,
    box: tuple[int, int, int, int],
    fill: tuple[int, int, int, int] = (255, 0, 0, 255),
) -> Image.Image:
    """Return a copy of img with an inclusive rectangle filled."""
    changed = img.copy()
    ImageDraw.Draw(changed).rectangle(box, fill=fill)
    return changed


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def gray_image() -> Image.Image:
    """A 100x100 solid gray image."""
    return make_image(100, 100)


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Factory encoding a solid PNG of the given size and color."""

    def _make(width: int = 100, height: int = 100, color=(128, 128, 128, 255)) -> bytes:
        return encode(make_image(width, height, color))

    return _make


@pytest.fixture
def default_options() -> ComparisonOptions:
    """Options with every default applied."""
    return ComparisonOptions()


@pytest.fixture
def temp_options_file(tmp_path: Path) -> Path:
    """Options file with both pixel caps set."""
    path = tmp_path / "snapcompare.json"
    ComparisonOptions(maxDiffPixels=50, maxDiffPixelRatio=0.01).save(path)
    return path
