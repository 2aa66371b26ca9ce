"""
Geometric transform operations for ImageKit.

Every operation takes a PixelBuffer and returns a new PixelBuffer; the
input buffer is never modified.

Functions:
    parse_scale_factor: Read a "NN%" string or a raw multiplier
    scale: Scale by a factor, rounding dimensions up
    compute_resize_layout: Resize arithmetic for width/height/fit/cover/stretch
    resize: Resample (and for "cover", center-crop) to a ResizeSpec
    rotate: Rotate counter-clockwise by an angle, filling exposed corners
    flip_vertical: Reverse the row order
    flip_horizontal: Reverse the column order
    flip: Flip along "vertical", "horizontal" or "both"
"""

import logging
import math
import re
from typing import Any, Optional, Tuple

from PIL import Image

from IK_Libs.ColorLib.color_normalizer import normalize_color, to_pillow_rgba
from IK_Libs.ImageEditingLib.image_models import (
    Height,
    ResizeLayout,
    ResizeSpec,
    Width,
    WidthHeight,
)
from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.constants import (
    AXIS_BOTH,
    AXIS_HORIZONTAL,
    AXIS_VERTICAL,
    DEFAULT_ROTATE_BACKGROUND,
    POLICY_COVER,
    POLICY_STRETCH,
    RESAMPLE_FILTER,
    ROTATE_RESAMPLE_FILTER,
)
from IK_Libs.errors import InvalidDimensionsError, TransformFailedError

logger = logging.getLogger(__name__)

_QUARTER_TURNS = {
    90.0: Image.Transpose.ROTATE_90,
    180.0: Image.Transpose.ROTATE_180,
    270.0: Image.Transpose.ROTATE_270,
}


# ============================================================================
# Resampling
# ============================================================================

def _resample(
    image: Any,
    width: int,
    height: int,
    box: Optional[Tuple[float, float, float, float]] = None,
) -> Any:
    """Resample image (or the box region of it) to width x height."""
    try:
        return image.resize((width, height), RESAMPLE_FILTER, box=box)
    except (ValueError, OSError, MemoryError) as exc:
        raise TransformFailedError(f"Resize to {width}x{height} failed: {exc}") from exc


# ============================================================================
# Scale
# ============================================================================

def parse_scale_factor(factor: Any) -> float:
    """
    Read a scale factor.

    Args:
        factor: A percentage string such as "50%" (non-numeric characters
                are ignored) or a multiplier such as 0.5 or "0.5"

    Returns:
        The multiplier as a float

    Raises:
        InvalidDimensionsError: If the factor is unparsable or not positive
    """
    try:
        if isinstance(factor, str) and "%" in factor:
            value = float(re.sub(r"[^0-9.]", "", factor)) / 100
        else:
            value = float(factor)
    except (TypeError, ValueError) as exc:
        raise InvalidDimensionsError(f"Invalid scale factor: {factor!r}") from exc

    if not math.isfinite(value) or value <= 0:
        raise InvalidDimensionsError(f"Scale factor must be positive, got {factor!r}")
    return value


def scale(buffer: PixelBuffer, factor: Any = 1) -> PixelBuffer:
    """
    Scale a buffer by a factor.

    Both new dimensions are rounded up, so a dimension never shrinks
    below the requested scale.

    Raises:
        InvalidDimensionsError: If the factor is unparsable or not positive
        TransformFailedError: If resampling fails
    """
    multiplier = parse_scale_factor(factor)
    new_width = math.ceil(buffer.width * multiplier)
    new_height = math.ceil(buffer.height * multiplier)

    logger.debug(f"Scaling {buffer.width}x{buffer.height} by {multiplier} to {new_width}x{new_height}")
    return PixelBuffer(_resample(buffer.image, new_width, new_height))


# ============================================================================
# Resize
# ============================================================================

def compute_resize_layout(width: int, height: int, spec: ResizeSpec) -> ResizeLayout:
    """
    Work out the scaled size, canvas size and crop offsets of a resize.

    Args:
        width: Current width
        height: Current height
        spec: Width, Height or WidthHeight request

    Returns:
        ResizeLayout with every dimension already rounded up
    """
    cover = False

    if isinstance(spec, Width):
        new_width = spec.width
        new_height = height * new_width / width
    elif isinstance(spec, Height):
        new_height = spec.height
        new_width = width * new_height / height
    elif isinstance(spec, WidthHeight):
        requested_width, requested_height = spec.width, spec.height
        # Source dimensions the requested box would have at the current scale
        pretend_height = width * requested_height / requested_width
        pretend_width = height * requested_width / requested_height

        by_width = (requested_width, height * requested_width / width)
        by_height = (width * requested_height / height, requested_height)

        if spec.policy == POLICY_STRETCH:
            new_width, new_height = requested_width, requested_height
        elif spec.policy == POLICY_COVER:
            cover = True
            if pretend_width > width:
                new_width, new_height = by_width
            elif pretend_height > height:
                new_width, new_height = by_height
            else:
                new_width, new_height = by_width
        else:
            if pretend_height > height:
                new_width, new_height = by_width
            elif pretend_width > width:
                new_width, new_height = by_height
            else:
                new_width, new_height = by_width
    else:
        raise TypeError(f"Expected a ResizeSpec, got {type(spec)}")

    new_width = math.ceil(new_width)
    new_height = math.ceil(new_height)

    if not cover:
        return ResizeLayout(new_width, new_height, new_width, new_height)

    return ResizeLayout(
        scaled_width=new_width,
        scaled_height=new_height,
        canvas_width=spec.width,
        canvas_height=spec.height,
        offset_x=math.ceil(abs((new_width - spec.width) / 2)),
        offset_y=math.ceil(abs((new_height - spec.height) / 2)),
    )


def resize(buffer: PixelBuffer, spec: ResizeSpec) -> PixelBuffer:
    """
    Resize a buffer according to a ResizeSpec.

    For "cover" only the visible window of the scaled image is resampled,
    which gives the same pixels as scaling then cropping without
    allocating the full scaled image.

    Raises:
        InvalidDimensionsError: If the layout has an empty dimension
        TransformFailedError: If resampling fails
    """
    layout = compute_resize_layout(buffer.width, buffer.height, spec)
    if min(layout.scaled_width, layout.scaled_height, layout.canvas_width, layout.canvas_height) <= 0:
        raise InvalidDimensionsError(f"Resize produced an empty image: {layout}")

    logger.debug(f"Resizing {buffer.width}x{buffer.height} with {spec}: {layout}")

    if not layout.is_cropped:
        return PixelBuffer(_resample(buffer.image, layout.canvas_width, layout.canvas_height))

    # Map the visible window back into source coordinates
    x_ratio = buffer.width / layout.scaled_width
    y_ratio = buffer.height / layout.scaled_height
    box = (
        layout.offset_x * x_ratio,
        layout.offset_y * y_ratio,
        (layout.offset_x + layout.canvas_width) * x_ratio,
        (layout.offset_y + layout.canvas_height) * y_ratio,
    )
    return PixelBuffer(_resample(buffer.image, layout.canvas_width, layout.canvas_height, box=box))


# ============================================================================
# Rotate
# ============================================================================

def rotate(buffer: PixelBuffer, angle: float = 0, background: Any = DEFAULT_ROTATE_BACKGROUND) -> PixelBuffer:
    """
    Rotate a buffer counter-clockwise.

    The canvas grows to hold the whole rotated image; exposed corners are
    filled with the background color. Multiples of 90 degrees are exact
    pixel transposes.

    Args:
        buffer: Source buffer
        angle: Degrees, positive is counter-clockwise
        background: Any color accepted by normalize_color

    Raises:
        InvalidColorError: If the background color cannot be parsed
        TransformFailedError: If the rotation fails
    """
    fill = to_pillow_rgba(normalize_color(background))
    angle = float(angle)
    turn = angle % 360.0

    logger.debug(f"Rotating {buffer.width}x{buffer.height} by {angle} degrees")
    try:
        if turn == 0:
            rotated = buffer.image.copy()
        elif turn in _QUARTER_TURNS:
            rotated = buffer.image.transpose(_QUARTER_TURNS[turn])
        else:
            rotated = buffer.image.rotate(
                angle,
                resample=ROTATE_RESAMPLE_FILTER,
                expand=True,
                fillcolor=fill,
            )
    except (ValueError, OSError, MemoryError) as exc:
        raise TransformFailedError(f"Rotate by {angle} degrees failed: {exc}") from exc

    return PixelBuffer(rotated)


# ============================================================================
# Flip
# ============================================================================

def _transpose(buffer: PixelBuffer, method: Any, label: str) -> PixelBuffer:
    try:
        return PixelBuffer(buffer.image.transpose(method))
    except (ValueError, OSError, MemoryError) as exc:
        raise TransformFailedError(f"Flip {label} failed: {exc}") from exc


def flip_vertical(buffer: PixelBuffer) -> PixelBuffer:
    """Reverse the row order (top becomes bottom)."""
    return _transpose(buffer, Image.Transpose.FLIP_TOP_BOTTOM, AXIS_VERTICAL)


def flip_horizontal(buffer: PixelBuffer) -> PixelBuffer:
    """Reverse the column order (left becomes right)."""
    return _transpose(buffer, Image.Transpose.FLIP_LEFT_RIGHT, AXIS_HORIZONTAL)


def normalize_axis(axis: Any) -> str:
    """Only the first letter counts: 'v' vertical, 'h' horizontal, anything else both."""
    key = str(axis or "").strip().lower()[:1]
    if key == "v":
        return AXIS_VERTICAL
    if key == "h":
        return AXIS_HORIZONTAL
    return AXIS_BOTH


def flip(buffer: PixelBuffer, axis: str = AXIS_BOTH) -> PixelBuffer:
    """
    Flip a buffer.

    Args:
        buffer: Source buffer
        axis: "vertical", "horizontal" or "both"

    Returns:
        The flipped buffer; "both" only returns once both flips succeed
    """
    resolved = normalize_axis(axis)
    logger.debug(f"Flipping {buffer.width}x{buffer.height} along {resolved}")

    if resolved == AXIS_VERTICAL:
        return flip_vertical(buffer)
    if resolved == AXIS_HORIZONTAL:
        return flip_horizontal(buffer)
    return flip_horizontal(flip_vertical(buffer))
