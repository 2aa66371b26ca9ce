"""
Simple per-pixel and convolution filters for ImageKit.

Provides:
- Point filters: negative, brightness, contrast, colorize
- 3x3 convolutions: edge detect, emboss, Gaussian blur, mean removal, smooth
- Selective (edge-preserving) blur
- Pixelate (top-left sample or block average)

Every filter keeps the buffer's alpha channel and returns a new buffer.

Example:
    >>> buffer = PixelBuffer.from_image(Image.open("photo.jpg"))
    >>> brighter = brightness(buffer, 40)
    >>> soft = blur(buffer, 3)
    >>> blocky = pixelate(buffer, 8, advanced=True)
"""

import logging
from typing import Any, Sequence

import numpy as np
from PIL import ImageFilter

from IK_Libs.ColorLib.color_normalizer import is_transparent, normalize_color, rgb_channels
from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.constants import BRIGHTNESS_RANGE, CONTRAST_RANGE, DEFAULT_COLORIZE_COLOR
from IK_Libs.errors import InvalidColorError, InvalidDimensionsError, TransformFailedError
from IK_Libs.rounding import clamp

logger = logging.getLogger(__name__)

EDGE_DETECT_KERNEL = (-1, 0, -1, 0, 4, 0, -1, 0, -1)
EMBOSS_KERNEL = (1.5, 0, 0, 0, 0, 0, 0, 0, -1.5)
GAUSSIAN_KERNEL = (1, 2, 1, 2, 4, 2, 1, 2, 1)
MEAN_REMOVAL_KERNEL = (-1, -1, -1, -1, 9, -1, -1, -1, -1)


# ============================================================================
# Helpers
# ============================================================================

def _apply_rgb(buffer: PixelBuffer, func: Any, label: str) -> PixelBuffer:
    """Run func on an (h, w, 3) float array, round half-up and reattach alpha."""
    try:
        pixels = buffer.to_array()
        rgb = func(pixels[..., :3].astype(np.float64))
        pixels[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
        return PixelBuffer.from_array(pixels)
    except (ValueError, MemoryError) as exc:
        raise TransformFailedError(f"{label} filter failed: {exc}") from exc


def _convolve(buffer: PixelBuffer, kernel: Sequence[float], scale: float, offset: float, label: str) -> PixelBuffer:
    """Convolve the RGB channels with a 3x3 kernel, keeping alpha untouched."""
    try:
        rgb = buffer.image.convert("RGB")
        filtered = rgb.filter(ImageFilter.Kernel((3, 3), kernel, scale=scale, offset=offset))
        filtered.putalpha(buffer.image.getchannel("A"))
        return PixelBuffer(filtered)
    except (ValueError, OSError, MemoryError) as exc:
        raise TransformFailedError(f"{label} filter failed: {exc}") from exc


def _repeat(buffer: PixelBuffer, times: Any, step: Any) -> PixelBuffer:
    result = buffer
    for _ in range(max(0, int(times))):
        result = step(result)
    if result is buffer:
        return PixelBuffer(buffer.to_image())
    return result


# ============================================================================
# Point filters
# ============================================================================

def negative(buffer: PixelBuffer) -> PixelBuffer:
    """Invert the RGB channels."""
    return _apply_rgb(buffer, lambda rgb: 255 - rgb, "Negative")


def brightness(buffer: PixelBuffer, amount: int = 0) -> PixelBuffer:
    """
    Adjust brightness.

    Args:
        buffer: Source buffer
        amount: -100 (darker) to 100 (lighter); clamped to that range
    """
    amount = clamp(int(amount), *BRIGHTNESS_RANGE)
    logger.debug(f"Brightness {amount}")
    return _apply_rgb(buffer, lambda rgb: rgb + amount, "Brightness")


def contrast(buffer: PixelBuffer, amount: int = 0) -> PixelBuffer:
    """
    Adjust contrast.

    Args:
        buffer: Source buffer
        amount: -100 (less contrast) to 100 (more contrast); clamped
    """
    level = clamp(-int(amount), *CONTRAST_RANGE)
    factor = ((100.0 - level) / 100.0) ** 2
    logger.debug(f"Contrast level {level} (factor {factor:.4f})")
    return _apply_rgb(buffer, lambda rgb: ((rgb / 255.0 - 0.5) * factor + 0.5) * 255.0, "Contrast")


def colorize(buffer: PixelBuffer, color: Any = DEFAULT_COLORIZE_COLOR) -> PixelBuffer:
    """
    Add a color to every pixel.

    Raises:
        InvalidColorError: If the color cannot be parsed or is transparent
    """
    normalized = normalize_color(color)
    if is_transparent(normalized):
        raise InvalidColorError("Colorize needs an opaque color, got 'transparent'")
    offset = np.array(rgb_channels(normalized), dtype=np.float64)
    return _apply_rgb(buffer, lambda rgb: rgb + offset, "Colorize")


# ============================================================================
# Convolution filters
# ============================================================================

def edge_detect(buffer: PixelBuffer) -> PixelBuffer:
    return _convolve(buffer, EDGE_DETECT_KERNEL, 1, 127, "Edge detect")


def emboss(buffer: PixelBuffer) -> PixelBuffer:
    return _convolve(buffer, EMBOSS_KERNEL, 1, 127, "Emboss")


def remove_mean(buffer: PixelBuffer) -> PixelBuffer:
    """Mean removal, which gives a sketch-like sharpened image."""
    return _convolve(buffer, MEAN_REMOVAL_KERNEL, 1, 0, "Mean removal")


def blur(buffer: PixelBuffer, amount: int = 1) -> PixelBuffer:
    """Apply a 3x3 Gaussian blur `amount` times."""
    return _repeat(buffer, amount, lambda current: _convolve(current, GAUSSIAN_KERNEL, 16, 0, "Blur"))


def smooth(buffer: PixelBuffer, weight: int = 0) -> PixelBuffer:
    """
    Smooth with a 3x3 kernel whose centre weight is `weight`.

    Raises:
        TransformFailedError: If weight is -8 (the kernel sums to zero)
    """
    weight = int(weight)
    divisor = weight + 8
    if divisor == 0:
        raise TransformFailedError("Smooth weight of -8 gives a zero divisor")
    kernel = (1, 1, 1, 1, weight, 1, 1, 1, 1)
    return _convolve(buffer, kernel, divisor, 0, "Smooth")


def _selective_blur_step(buffer: PixelBuffer) -> PixelBuffer:
    """One 3x3 pass where neighbours count less the more they differ from the centre."""
    def step(rgb: np.ndarray) -> np.ndarray:
        height, width = rgb.shape[:2]
        padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
        total = np.zeros_like(rgb)
        weights = np.zeros_like(rgb)
        for dy in range(3):
            for dx in range(3):
                neighbour = padded[dy:dy + height, dx:dx + width]
                weight = 1.0 - np.abs(neighbour - rgb) / 255.0
                total += neighbour * weight
                weights += weight
        return total / weights

    return _apply_rgb(buffer, step, "Selective blur")


def selective_blur(buffer: PixelBuffer, amount: int = 1) -> PixelBuffer:
    """Apply an edge-preserving blur `amount` times to reduce noise."""
    return _repeat(buffer, amount, _selective_blur_step)


# ============================================================================
# Pixelate
# ============================================================================

def pixelate(buffer: PixelBuffer, block_size: int = 1, advanced: bool = True) -> PixelBuffer:
    """
    Pixelate a buffer.

    Args:
        buffer: Source buffer
        block_size: Edge length of each block in pixels (1 is a no-op)
        advanced: Fill blocks with their average color instead of their
                  top-left pixel

    Raises:
        InvalidDimensionsError: If block_size < 1
    """
    block_size = int(block_size)
    if block_size < 1:
        raise InvalidDimensionsError(f"block_size must be >= 1, got {block_size}")
    if block_size == 1:
        return PixelBuffer(buffer.to_image())

    pixels = buffer.to_array()
    result = np.empty_like(pixels)
    for top in range(0, buffer.height, block_size):
        for left in range(0, buffer.width, block_size):
            block = pixels[top:top + block_size, left:left + block_size]
            if advanced:
                color = np.floor(block.reshape(-1, 4).mean(axis=0) + 0.5)
            else:
                color = block[0, 0]
            result[top:top + block_size, left:left + block_size] = color

    logger.debug(f"Pixelated with {block_size}px blocks (advanced={advanced})")
    return PixelBuffer.from_array(result)
