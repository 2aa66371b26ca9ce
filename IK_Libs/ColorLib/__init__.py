"""
ColorLib - Color parsing and conversion

Normalizes hex, rgb()/rgba() strings, tuples and "transparent" into
canonical color tuples, and converts between alpha conventions.
"""

from IK_Libs.ColorLib.color_normalizer import (
    TRANSPARENT,
    NormalizedColor,
    RgbColor,
    RgbaColor,
    codec_alpha_to_pillow,
    hex_to_rgb,
    is_transparent,
    normalize_color,
    normalize_color_or_default,
    opacity_to_codec_alpha,
    rgb_channels,
    to_pillow_rgba,
)

__all__ = [
    "TRANSPARENT",
    "NormalizedColor",
    "RgbColor",
    "RgbaColor",
    "codec_alpha_to_pillow",
    "hex_to_rgb",
    "is_transparent",
    "normalize_color",
    "normalize_color_or_default",
    "opacity_to_codec_alpha",
    "rgb_channels",
    "to_pillow_rgba",
]
