"""
Color normalization for ImageKit.

Turns the loose color inputs accepted by the public API into canonical
RGB(A) tuples. Accepted inputs:

- RGB triples or RGBA quadruples (passed through)
- HTML hex strings: "#RGB", "#RRGGBB", with or without the "#"
- CSS style strings: "rgb(r, g, b)" and "rgba(r, g, b, opacity)"
- The literal "transparent"

Alpha values on RgbaColor use the codec convention where 0 is opaque and
127 is fully transparent. Helpers convert that convention to and from the
0-1 opacity domain and Pillow's 0-255 alpha channel.

Functions:
    normalize_color: Parse a color or raise InvalidColorError
    normalize_color_or_default: Parse a color, falling back to a default with a warning
    hex_to_rgb: Parse a 3 or 6 digit hex string
    to_pillow_rgba: Convert a normalized color into a Pillow RGBA tuple
"""

import logging
import re
from typing import Any, Literal, Tuple, Union

from IK_Libs.constants import CODEC_ALPHA_OPAQUE, CODEC_ALPHA_TRANSPARENT, TRANSPARENT_FILL
from IK_Libs.errors import InvalidColorError
from IK_Libs.rounding import clamp, round_half_up

logger = logging.getLogger(__name__)

RgbColor = Tuple[int, int, int]
RgbaColor = Tuple[int, int, int, int]
Transparent = Literal["transparent"]
NormalizedColor = Union[RgbColor, RgbaColor, Transparent]

TRANSPARENT: Transparent = "transparent"

_RGB_PREFIX = re.compile(r"^.*?rgb\(", re.IGNORECASE)
_CLOSING_PAREN = re.compile(r"\).*$", re.DOTALL)
_NON_HEX_OR_COMMA = re.compile(r"[^A-F0-9,]", re.IGNORECASE)
_RGBA_FUNCTION = re.compile(r"^\s*rgba\(([^)]*)\)", re.IGNORECASE)
_HEX_DIGITS = re.compile(r"^[0-9A-Fa-f]+$")


def is_transparent(color: Any) -> bool:
    return isinstance(color, str) and color.strip().lower() == TRANSPARENT


def hex_to_rgb(hex_value: str) -> RgbColor:
    """
    Convert a 3 or 6 character hex color to an RGB triple.

    Args:
        hex_value: Hex string with or without a leading '#'

    Returns:
        (r, g, b) tuple with channels in 0-255

    Raises:
        InvalidColorError: If the string is not 3 or 6 hex digits
    """
    text = str(hex_value)
    if text.startswith("#"):
        text = text[1:]

    if len(text) == 3:
        groups = [digit * 2 for digit in text]
    elif len(text) == 6:
        groups = [text[0:2], text[2:4], text[4:6]]
    else:
        raise InvalidColorError(f"Hex color must have 3 or 6 digits, got {hex_value!r}")

    if not _HEX_DIGITS.match(text):
        raise InvalidColorError(f"Invalid hex color: {hex_value!r}")

    return tuple(int(group, 16) for group in groups)


def opacity_to_codec_alpha(opacity: float) -> int:
    """Map a 0-1 opacity onto the 0 (opaque) - 127 (transparent) alpha convention."""
    opacity = clamp(float(opacity), 0.0, 1.0)
    return CODEC_ALPHA_TRANSPARENT - round_half_up(opacity * CODEC_ALPHA_TRANSPARENT)


def codec_alpha_to_pillow(alpha: int) -> int:
    """Map a 0-127 codec alpha onto Pillow's 0 (transparent) - 255 (opaque) alpha."""
    alpha = clamp(int(alpha), CODEC_ALPHA_OPAQUE, CODEC_ALPHA_TRANSPARENT)
    return round_half_up(255 * (CODEC_ALPHA_TRANSPARENT - alpha) / CODEC_ALPHA_TRANSPARENT)


def _parse_rgba_function(body: str) -> RgbaColor:
    parts = [part.strip() for part in body.split(",")]
    if len(parts) != 4:
        raise InvalidColorError(f"rgba() needs 4 components, got {len(parts)}")

    try:
        red, green, blue = (int(part) for part in parts[:3])
        opacity = float(parts[3])
    except ValueError as exc:
        raise InvalidColorError(f"Invalid rgba() components: {body!r}") from exc

    for channel in (red, green, blue):
        if not 0 <= channel <= 255:
            raise InvalidColorError(f"rgba() channel out of range: {channel}")

    return red, green, blue, opacity_to_codec_alpha(opacity)


def _normalize_sequence(color: Any) -> Union[RgbColor, RgbaColor]:
    values = list(color)
    if len(values) not in (3, 4):
        raise InvalidColorError(f"Color sequences need 3 or 4 values, got {len(values)}")
    try:
        return tuple(int(value) for value in values)
    except (TypeError, ValueError) as exc:
        raise InvalidColorError(f"Color sequence must contain integers: {color!r}") from exc


def normalize_color(color: Any) -> NormalizedColor:
    """
    Normalize a color input into an RGB(A) tuple or TRANSPARENT.

    Strings are cleaned the permissive way: everything up to "rgb(" and
    from the first ")" on is dropped, then every character that is not a
    hex digit or comma. Three decimal tokens are read as RGB; anything else
    is hex-parsed from the first token.

    Args:
        color: Sequence, hex/rgb()/rgba() string, or "transparent"

    Returns:
        RgbColor, RgbaColor (codec alpha) or TRANSPARENT

    Raises:
        InvalidColorError: If the input cannot be interpreted
    """
    if color is None or isinstance(color, bool):
        raise InvalidColorError(f"Not a color: {color!r}")

    if isinstance(color, (list, tuple)):
        return _normalize_sequence(color)

    text = str(color)
    if is_transparent(text):
        return TRANSPARENT

    rgba_match = _RGBA_FUNCTION.match(text)
    if rgba_match:
        return _parse_rgba_function(rgba_match.group(1))

    cleaned = _RGB_PREFIX.sub("", text, count=1)
    cleaned = _CLOSING_PAREN.sub("", cleaned, count=1)
    cleaned = _NON_HEX_OR_COMMA.sub("", cleaned)
    tokens = cleaned.split(",")

    if len(tokens) == 3 and all(token.isdigit() for token in tokens):
        rgb = tuple(int(token) for token in tokens)
        if any(channel > 255 for channel in rgb):
            raise InvalidColorError(f"rgb() channel out of range: {color!r}")
        return rgb

    return hex_to_rgb(tokens[0])


def normalize_color_or_default(
    color: Any,
    default: NormalizedColor,
    label: str = "color",
) -> NormalizedColor:
    """
    Normalize a color, substituting a default when it cannot be parsed.

    Args:
        color: Color input accepted by normalize_color
        default: Color returned when normalization fails
        label: Name used in the warning (e.g. "white", "black")

    Returns:
        The normalized color or the default
    """
    try:
        return normalize_color(color)
    except InvalidColorError as exc:
        logger.warning(f"{label.capitalize()} value could not be determined ({exc}). Using {default} instead.")
        return default


def to_pillow_rgba(color: NormalizedColor) -> RgbaColor:
    """Convert a normalized color to a Pillow RGBA tuple (alpha 0-255)."""
    if is_transparent(color):
        return TRANSPARENT_FILL
    if len(color) == 4:
        red, green, blue, alpha = color
        return red, green, blue, codec_alpha_to_pillow(alpha)
    red, green, blue = color
    return red, green, blue, 255


def rgb_channels(color: NormalizedColor) -> RgbColor:
    """Return the RGB part of a normalized color (black for TRANSPARENT)."""
    if is_transparent(color):
        return 0, 0, 0
    return tuple(color[:3])
