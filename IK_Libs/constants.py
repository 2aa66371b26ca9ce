"""
Constants and configuration values for ImageKit.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the toolkit.
"""

from PIL import Image

# Export defaults
DEFAULT_EXPORT_FORMAT = "jpg"
DEFAULT_EXPORT_QUALITY = 50
MIN_QUALITY = 0
MAX_QUALITY = 100

# PNG compression levels (0 = none, 9 = maximum)
MIN_PNG_COMPRESS_LEVEL = 0
MAX_PNG_COMPRESS_LEVEL = 9

# Default colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
DEFAULT_ROTATE_BACKGROUND = WHITE
DEFAULT_COLORIZE_COLOR = "#FFF"
TRANSPARENT_FILL = (0, 0, 0, 0)

# Codec alpha convention: 0 = opaque, 127 = fully transparent
CODEC_ALPHA_OPAQUE = 0
CODEC_ALPHA_TRANSPARENT = 127

# Buffer mode used for every decoded raster
BUFFER_MODE = "RGBA"

# Resampling used by scale/resize
RESAMPLE_FILTER = Image.Resampling.BILINEAR
ROTATE_RESAMPLE_FILTER = Image.Resampling.BICUBIC

# Filter parameter ranges
BRIGHTNESS_RANGE = (-100, 100)
CONTRAST_RANGE = (-100, 100)

# Orientation names
ORIENTATION_LANDSCAPE = "landscape"
ORIENTATION_PORTRAIT = "portrait"
ORIENTATION_SQUARE = "square"

# Resize policies
POLICY_FIT = "fit"
POLICY_COVER = "cover"
POLICY_STRETCH = "stretch"
RESIZE_POLICIES = (POLICY_FIT, POLICY_COVER, POLICY_STRETCH)

# Flip axes
AXIS_VERTICAL = "vertical"
AXIS_HORIZONTAL = "horizontal"
AXIS_BOTH = "both"

# Formats Pillow may decode into a session
SUPPORTED_IMPORT_FORMATS = {"JPEG", "PNG", "GIF", "WEBP", "BMP"}

# Export format names -> Pillow format names
EXPORT_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
    "bmp": "BMP",
}

# Pillow format -> canonical file extension
FORMAT_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
}

# Pillow format -> every extension accepted for it
FORMAT_EXTENSION_ALIASES = {
    "JPEG": {".jpg", ".jpeg"},
    "PNG": {".png"},
    "GIF": {".gif"},
    "WEBP": {".webp"},
    "BMP": {".bmp"},
}

# Pillow format -> mime type
FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
}

# Formats that cannot store an alpha channel
OPAQUE_ONLY_FORMATS = {"JPEG", "BMP"}

# Recipe field names
FIELD_OPERATIONS = "operations"
FIELD_EXPORT = "export"
FIELD_OPERATION_NAME = "op"
FIELD_EXPORT_FORMAT = "format"
FIELD_EXPORT_QUALITY = "quality"
FIELD_EXPORT_DESTINATION = "destination"
