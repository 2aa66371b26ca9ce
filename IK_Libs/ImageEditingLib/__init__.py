"""
ImageEditingLib - Core image editing functionality

This module provides the pixel buffer, the image models, and the
geometric, tone and filter operations of ImageKit.
"""

from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.ImageEditingLib.image_models import (
    Height,
    ImageMetadata,
    ImageSource,
    ResizeLayout,
    ResizeSpec,
    Width,
    WidthHeight,
    resize_spec_from_dimensions,
)
from IK_Libs.ImageEditingLib.geometry_ops import (
    compute_resize_layout,
    flip,
    flip_horizontal,
    flip_vertical,
    resize,
    rotate,
    scale,
)
from IK_Libs.ImageEditingLib.tone_ops import grayscale, monochrome
from IK_Libs.ImageEditingLib.filter_ops import (
    blur,
    brightness,
    colorize,
    contrast,
    edge_detect,
    emboss,
    negative,
    pixelate,
    remove_mean,
    selective_blur,
    smooth,
)

__all__ = [
    "PixelBuffer",
    "Height",
    "ImageMetadata",
    "ImageSource",
    "ResizeLayout",
    "ResizeSpec",
    "Width",
    "WidthHeight",
    "resize_spec_from_dimensions",
    "compute_resize_layout",
    "flip",
    "flip_horizontal",
    "flip_vertical",
    "resize",
    "rotate",
    "scale",
    "grayscale",
    "monochrome",
    "blur",
    "brightness",
    "colorize",
    "contrast",
    "edge_detect",
    "emboss",
    "negative",
    "pixelate",
    "remove_mean",
    "selective_blur",
    "smooth",
]
