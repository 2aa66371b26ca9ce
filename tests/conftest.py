"""
Pytest configuration and shared fixtures for ImageKit tests.

This module provides shared test fixtures and configuration
used across multiple test modules. Images are built in memory with Pillow.
"""

import pytest
from pathlib import Path

from PIL import Image


def gradient_image(width: int = 16, height: int = 8) -> Image.Image:
    """Opaque RGBA image with a left-to-right red ramp and a top-to-bottom green ramp."""
    image = Image.new("RGBA", (width, height))
    for y in range(height):
        for x in range(width):
            red = int(255 * x / max(1, width - 1))
            green = int(255 * y / max(1, height - 1))
            image.putpixel((x, y), (red, green, 128, 255))
    return image


@pytest.fixture
def sample_image_file(tmp_path) -> Path:
    """A 16x8 PNG file on disk."""
    path = tmp_path / "sample.png"
    gradient_image().save(path, format="PNG")
    return path


@pytest.fixture
def sample_jpeg_file(tmp_path) -> Path:
    """A 40x20 JPEG file on disk."""
    path = tmp_path / "photo.jpg"
    gradient_image(40, 20).convert("RGB").save(path, format="JPEG", quality=90)
    return path


@pytest.fixture
def codec_rgba_colors():
    """RgbaColor samples in the codec alpha convention: 0 is opaque, 127 transparent."""
    return {
        "opaque_red": (255, 0, 0, 0),
        "half_green": (0, 255, 0, 64),
        "clear_blue": (0, 0, 255, 127),
    }
