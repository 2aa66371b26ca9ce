"""
Tone transform operations for ImageKit.

Provides grayscale conversion and the duotone ("monochrome") remap that
recolors a grayscale image between a white color and a black color.

The duotone alpha is computed in the codec convention (0 opaque, 127
fully transparent) and converted to Pillow's 0-255 alpha at the end.

Example:
    >>> buffer = PixelBuffer.from_image(Image.open("photo.jpg"))
    >>> sepia = monochrome(buffer, white="#F4E6C8", black="#3B2A1A")
    >>> cutout = monochrome(buffer, white="#FFF", black="transparent")
"""

import logging
from typing import Any

import numpy as np
from PIL import Image

from IK_Libs.ColorLib.color_normalizer import (
    codec_alpha_to_pillow,
    is_transparent,
    normalize_color_or_default,
    rgb_channels,
)
from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.constants import BLACK, CODEC_ALPHA_TRANSPARENT, WHITE
from IK_Libs.errors import TransformFailedError

logger = logging.getLogger(__name__)


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """
    Convert a buffer to grayscale.

    Each pixel's RGB channels are replaced by its ITU-R 601-2 luma
    (0.299 R + 0.587 G + 0.114 B, as Pillow's "L" mode computes it);
    alpha is kept.

    Raises:
        TransformFailedError: If the conversion fails
    """
    try:
        luma = buffer.image.convert("L")
        alpha = buffer.image.getchannel("A")
        return PixelBuffer(Image.merge("RGBA", (luma, luma, luma, alpha)))
    except (ValueError, OSError, MemoryError) as exc:
        raise TransformFailedError(f"Grayscale conversion failed: {exc}") from exc


def _codec_alpha_to_pillow_array(alpha: np.ndarray) -> np.ndarray:
    """Vectorized codec_alpha_to_pillow with half-up rounding."""
    opaque = (CODEC_ALPHA_TRANSPARENT - alpha) * 255.0 / CODEC_ALPHA_TRANSPARENT
    return np.floor(opaque + 0.5).astype(np.uint8)


def _solid_layer(shape: Any, rgb: Any, alpha: Any) -> np.ndarray:
    layer = np.empty(shape[:2] + (4,), dtype=np.uint8)
    layer[..., :3] = rgb
    layer[..., 3] = alpha
    return layer


def monochrome(buffer: PixelBuffer, white: Any = WHITE, black: Any = BLACK) -> PixelBuffer:
    """
    Remap a buffer onto a two-color gradient.

    The image is converted to grayscale and each pixel's luma decides how
    much of the black color covers the white color. When black is
    "transparent", the white color is painted with an alpha proportional
    to the luma instead, so dark areas become see-through.

    Args:
        buffer: Source buffer
        white: Color for the brightest pixels, or "transparent"
        black: Color for the darkest pixels, or "transparent"

    Returns:
        The recolored buffer; plain grayscale for pure white and black

    Raises:
        TransformFailedError: If the grayscale step fails
    """
    white = normalize_color_or_default(white, WHITE, "white")
    black = normalize_color_or_default(black, BLACK, "black")
    white_is_transparent = is_transparent(white)
    black_is_transparent = is_transparent(black)

    gray = grayscale(buffer)

    if not white_is_transparent and not black_is_transparent:
        if tuple(white) == WHITE and tuple(black) == BLACK:
            return gray

    logger.debug(f"Duotone remap with white={white} black={black}")

    pixels = gray.to_array()
    luma = pixels[..., 0].astype(np.float64)
    luma_alpha = np.floor(CODEC_ALPHA_TRANSPARENT * luma / 255.0 + 0.5)
    white_rgb = rgb_channels(white)
    black_rgb = rgb_channels(black)

    if black_is_transparent:
        # Brighter pixels get a more opaque white over a transparent base
        codec_alpha = CODEC_ALPHA_TRANSPARENT - luma_alpha
        if white_is_transparent:
            codec_alpha = np.full_like(codec_alpha, CODEC_ALPHA_TRANSPARENT)
        base = _solid_layer(pixels.shape, white_rgb, _codec_alpha_to_pillow_array(codec_alpha))
        top = _solid_layer(pixels.shape, (0, 0, 0), 0)
    else:
        # Darker pixels get a more opaque black over a solid white base
        base_alpha = codec_alpha_to_pillow(CODEC_ALPHA_TRANSPARENT if white_is_transparent else 0)
        base = _solid_layer(pixels.shape, white_rgb, base_alpha)
        top = _solid_layer(pixels.shape, black_rgb, _codec_alpha_to_pillow_array(luma_alpha))

    try:
        composite = Image.alpha_composite(Image.fromarray(base), Image.fromarray(top))
    except ValueError as exc:
        raise TransformFailedError(f"Duotone composite failed: {exc}") from exc

    return PixelBuffer(composite)
