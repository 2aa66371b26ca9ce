"""
Pixel buffer model for ImageKit.

A PixelBuffer owns one decoded true-color raster held as a Pillow image in
RGBA mode. Buffers are never resized in place: every transform builds a
new buffer and the previous one is dropped once it is superseded.
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import numpy as np
from PIL import Image

from IK_Libs.ColorLib.color_normalizer import RgbaColor
from IK_Libs.constants import BUFFER_MODE, TRANSPARENT_FILL


@dataclass(frozen=True)
class PixelBuffer:
    """Immutable-until-replaced RGBA raster.

    Attributes:
        image: Pillow image in RGBA mode, exclusively owned by this buffer
    """

    image: Image.Image

    def __post_init__(self):
        if self.image.mode != BUFFER_MODE:
            raise ValueError(f"PixelBuffer requires {BUFFER_MODE} mode, got {self.image.mode}")
        width, height = self.image.size
        if width <= 0 or height <= 0:
            raise ValueError(f"PixelBuffer dimensions must be positive, got {width}x{height}")

    @classmethod
    def from_image(cls, image: Any) -> "PixelBuffer":
        """Build a buffer from any Pillow image, converting to RGBA."""
        if image.mode != BUFFER_MODE:
            return cls(image.convert(BUFFER_MODE))
        return cls(image.copy())

    @classmethod
    def new(cls, width: int, height: int, fill: RgbaColor = TRANSPARENT_FILL) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise ValueError(f"PixelBuffer dimensions must be positive, got {width}x{height}")
        return cls(Image.new(BUFFER_MODE, (int(width), int(height)), tuple(fill)))

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: Sequence[RgbaColor]) -> "PixelBuffer":
        """
        Build a buffer from row-major RGBA pixels.

        Raises:
            ValueError: If the pixel count does not equal width * height
        """
        if len(pixels) != width * height:
            raise ValueError(
                f"Expected {width * height} pixels for {width}x{height}, got {len(pixels)}"
            )
        array = np.array([tuple(pixel) for pixel in pixels], dtype=np.uint8)
        return cls.from_array(array.reshape(height, width, 4))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (height, width, 4) uint8 array."""
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an (height, width, 4) array, got shape {array.shape}")
        return cls(Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8)))

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def pixels(self) -> List[RgbaColor]:
        """Row-major list of RGBA pixels, top row first."""
        return [tuple(pixel) for pixel in self.to_array().reshape(-1, 4).tolist()]

    def getpixel(self, x: int, y: int) -> RgbaColor:
        return self.image.getpixel((x, y))

    def to_array(self) -> np.ndarray:
        """Copy of the pixels as an (height, width, 4) uint8 array."""
        return np.array(self.image, dtype=np.uint8)

    def to_image(self) -> Any:
        """Copy of the pixels as a standalone Pillow image."""
        return self.image.copy()
