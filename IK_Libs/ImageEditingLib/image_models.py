"""
Image data models for ImageKit.

This module defines the core data structures shared by the engines and
the image session.

Classes:
    ImageSource: Where the current image was loaded from
    ImageMetadata: Width, height, aspect ratio and orientation of a buffer
    Width, Height, WidthHeight: Variants of a resize request
    ResizeLayout: Result of the resize arithmetic

Type Aliases:
    ResizePolicy: "fit", "cover" or "stretch"
    ResizeSpec: Width | Height | WidthHeight
    Orientation: "landscape", "portrait" or "square"

Functions:
    resize_spec_from_dimensions: Build a ResizeSpec from a scalar or pair
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, Union

from IK_Libs.constants import (
    ORIENTATION_LANDSCAPE,
    ORIENTATION_PORTRAIT,
    ORIENTATION_SQUARE,
    POLICY_FIT,
    RESIZE_POLICIES,
)
from IK_Libs.errors import InvalidDimensionsError

Orientation = Literal["landscape", "portrait", "square"]
ResizePolicy = Literal["fit", "cover", "stretch"]


@dataclass(frozen=True)
class ImageSource:
    path: Optional[Path]
    filename: str
    format: str
    mime_type: str


@dataclass(frozen=True)
class ImageMetadata:
    """Dimensions of the current buffer and the values derived from them.

    Fields:
        width: Width, px.
        height: Height, px.
        aspect: width / height.
        orientation: "landscape" (aspect > 1), "portrait" (aspect < 1) or "square".
    """
    width: int
    height: int
    aspect: float
    orientation: Orientation

    @classmethod
    def from_dimensions(cls, width: int, height: int) -> "ImageMetadata":
        aspect = width / height
        if aspect > 1:
            orientation = ORIENTATION_LANDSCAPE
        elif aspect < 1:
            orientation = ORIENTATION_PORTRAIT
        else:
            orientation = ORIENTATION_SQUARE
        return cls(width=width, height=height, aspect=aspect, orientation=orientation)

    @classmethod
    def from_buffer(cls, buffer: Any) -> "ImageMetadata":
        return cls.from_dimensions(buffer.width, buffer.height)


@dataclass(frozen=True)
class Width:
    """Resize to a width; the height follows the aspect ratio."""
    width: int


@dataclass(frozen=True)
class Height:
    """Resize to a height; the width follows the aspect ratio."""
    height: int


@dataclass(frozen=True)
class WidthHeight:
    """Resize into a width x height box using a policy."""
    width: int
    height: int
    policy: ResizePolicy = POLICY_FIT

    def __post_init__(self):
        if self.policy not in RESIZE_POLICIES:
            raise ValueError(
                f"Unknown resize policy: {self.policy}. "
                f"Valid policies: {', '.join(RESIZE_POLICIES)}"
            )


ResizeSpec = Union[Width, Height, WidthHeight]


@dataclass(frozen=True)
class ResizeLayout:
    """Where a resized image lands.

    The source is resampled to scaled_width x scaled_height, then the
    window starting at (offset_x, offset_y) of size canvas_width x
    canvas_height is kept. Offsets are only non-zero for "cover".
    """
    scaled_width: int
    scaled_height: int
    canvas_width: int
    canvas_height: int
    offset_x: int = 0
    offset_y: int = 0

    @property
    def is_cropped(self) -> bool:
        return (self.scaled_width, self.scaled_height) != (self.canvas_width, self.canvas_height)


def _dimension(value: Any) -> int:
    """Read one requested dimension; empty values become 0."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidDimensionsError(f"Dimension must be an integer, got {value!r}") from exc


def resize_spec_from_dimensions(dimensions: Any, policy: ResizePolicy = POLICY_FIT) -> ResizeSpec:
    """
    Build a ResizeSpec from the loose dimensions accepted by the session.

    A scalar, a one-element sequence, or a pair with an empty height means
    "width only". A pair with an empty width means "height only". Two
    values use the policy.

    Args:
        dimensions: int, [width], [width, height], [None, height], ...
        policy: Resize policy used when both dimensions are given

    Returns:
        Width, Height or WidthHeight

    Raises:
        InvalidDimensionsError: If dimensions are empty, zero or negative
        ValueError: If the policy is unknown
    """
    if isinstance(dimensions, (Width, Height, WidthHeight)):
        spec = dimensions
    elif isinstance(dimensions, (list, tuple)):
        values = [_dimension(value) for value in dimensions]
        if not values or len(values) > 2 or not any(values):
            raise InvalidDimensionsError(f"No usable dimensions in {dimensions!r}")
        if len(values) == 1 or not values[1]:
            spec = Width(values[0])
        elif not values[0]:
            spec = Height(values[1])
        else:
            spec = WidthHeight(values[0], values[1], policy)
    else:
        spec = Width(_dimension(dimensions))

    _validate_spec(spec)
    return spec


def _validate_spec(spec: ResizeSpec) -> None:
    values = [getattr(spec, name) for name in ("width", "height") if hasattr(spec, name)]
    if any(value <= 0 for value in values):
        raise InvalidDimensionsError(f"Resize dimensions must be positive, got {spec}")
