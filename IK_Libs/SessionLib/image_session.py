"""
Image session for ImageKit.

An ImageSession owns the current PixelBuffer of one image together with
its metadata. Each transform hands the current buffer to an engine and
swaps in the returned buffer only when the engine succeeds, so a failed
operation never leaves a half-built image behind.

Example:
    >>> session = ImageSession("photo.jpg")
    >>> session.resize((200, 200), "cover").monochrome("#FFF", "#223")
    >>> session.export("png", 90, "thumbs/")
    PosixPath('thumbs/photo.png')
"""

from pathlib import Path
from typing import Any, Optional, Tuple
import logging
import os

from PIL import Image, UnidentifiedImageError

from IK_Libs.ImageEditingLib import filter_ops, geometry_ops, tone_ops
from IK_Libs.ImageEditingLib.image_models import (
    ImageMetadata,
    ImageSource,
    ResizePolicy,
    resize_spec_from_dimensions,
)
from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.SessionLib.export_handler import SOURCE_PATH, ExportConfig, ExportHandler, StreamSink
from IK_Libs.constants import (
    AXIS_BOTH,
    BLACK,
    DEFAULT_COLORIZE_COLOR,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_QUALITY,
    DEFAULT_ROTATE_BACKGROUND,
    FORMAT_EXTENSION_ALIASES,
    FORMAT_MIME_TYPES,
    POLICY_FIT,
    SUPPORTED_IMPORT_FORMATS,
    WHITE,
)
from IK_Libs.errors import DecodeFailedError, NotLoadedError, UnsupportedFormatError

logger = logging.getLogger(__name__)


def decode_image(path: Path) -> Tuple[PixelBuffer, str]:
    """
    Decode the first frame of an image file.

    Args:
        path: File to decode

    Returns:
        Tuple of (PixelBuffer, Pillow format name)

    Raises:
        FileNotFoundError: If the path does not exist, is not a file or is unreadable
        UnsupportedFormatError: If Pillow decodes a format ImageKit does not handle
        DecodeFailedError: If Pillow rejects the data
    """
    if not path.exists() or not path.is_file() or not os.access(path, os.R_OK):
        raise FileNotFoundError(f"The image does not exist or is not readable: {path}")

    try:
        with Image.open(path) as img:
            if img.format not in SUPPORTED_IMPORT_FORMATS:
                raise UnsupportedFormatError(
                    f"Unsupported image format {img.format} in {path}. "
                    f"Supported: {', '.join(sorted(SUPPORTED_IMPORT_FORMATS))}"
                )
            image_format = img.format
            img.seek(0)
            buffer = PixelBuffer.from_image(img)
    except UnidentifiedImageError as exc:
        raise DecodeFailedError(f"The image could not be opened because it is not a valid image: {path}") from exc
    except OSError as exc:
        raise DecodeFailedError(f"Failed to decode image {path}: {exc}") from exc

    return buffer, image_format


class ImageSession:
    """Load -> transform chain -> export for a single image.

    Attributes:
        buffer: Current PixelBuffer, or None before load()
        metadata: ImageMetadata of the current buffer
        source: ImageSource describing where the image came from
    """

    def __init__(self, path: Optional[Any] = None):
        self.buffer: Optional[PixelBuffer] = None
        self.metadata: Optional[ImageMetadata] = None
        self.source: Optional[ImageSource] = None
        if path is not None:
            self.load(path)

    @classmethod
    def from_buffer(cls, buffer: PixelBuffer, filename: str = "image.png") -> "ImageSession":
        """Start a session from an in-memory buffer (no source file)."""
        session = cls()
        suffix = Path(filename).suffix.lower()
        image_format = next(
            (name for name, aliases in FORMAT_EXTENSION_ALIASES.items() if suffix in aliases),
            "PNG",
        )
        session.source = ImageSource(
            path=None,
            filename=filename,
            format=image_format,
            mime_type=FORMAT_MIME_TYPES[image_format],
        )
        session._replace(buffer)
        return session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self.buffer is not None

    @property
    def width(self) -> int:
        return self._metadata().width

    @property
    def height(self) -> int:
        return self._metadata().height

    @property
    def aspect(self) -> float:
        return self._metadata().aspect

    @property
    def orientation(self) -> str:
        return self._metadata().orientation

    def _metadata(self) -> ImageMetadata:
        self._require_buffer()
        return self.metadata

    def _require_buffer(self) -> PixelBuffer:
        if self.buffer is None:
            raise NotLoadedError("The image does not exist or is not readable")
        return self.buffer

    def _replace(self, buffer: PixelBuffer, geometric: bool = True) -> "ImageSession":
        self.buffer = buffer
        if geometric or self.metadata is None:
            self.metadata = ImageMetadata.from_buffer(buffer)
        return self

    # ------------------------------------------------------------------
    # Load / export
    # ------------------------------------------------------------------

    def load(self, path: Any) -> "ImageSession":
        """
        Load an image file, replacing any current image.

        Raises:
            FileNotFoundError: If the file does not exist or is unreadable
            UnsupportedFormatError: If the format is not supported
            DecodeFailedError: If the file cannot be decoded
        """
        path = Path(path)
        buffer, image_format = decode_image(path)

        self.source = ImageSource(
            path=path,
            filename=path.name,
            format=image_format,
            mime_type=FORMAT_MIME_TYPES[image_format],
        )
        self._replace(buffer)
        logger.info(f"Loaded {path} ({image_format}, {buffer.width}x{buffer.height})")
        return self

    def export(
        self,
        export_format: str = DEFAULT_EXPORT_FORMAT,
        quality: int = DEFAULT_EXPORT_QUALITY,
        destination: Any = SOURCE_PATH,
        sink: Optional[Any] = None,
    ) -> Optional[Path]:
        """
        Export the current image.

        Args:
            export_format: jpg, jpeg, png, gif, webp or bmp
            quality: 0-100, interpreted per format
            destination: SOURCE_PATH overwrites the loaded file, None writes
                         to the sink, a path without extension is a directory
            sink: Output sink used when destination is None (default: stdout)

        Returns:
            The written path, or None when writing to the sink

        Raises:
            NotLoadedError: If no image is loaded
            UnsupportedFormatError: If the format is not supported
            EncodeFailedError: If encoding or writing fails
        """
        buffer = self._require_buffer()
        handler = ExportHandler(ExportConfig(export_format=export_format, quality=quality))

        if destination is None:
            handler.write_to_sink(buffer, sink if sink is not None else StreamSink())
            return None

        return handler.save(buffer, destination, self.source)

    def display(
        self,
        export_format: str = DEFAULT_EXPORT_FORMAT,
        quality: int = DEFAULT_EXPORT_QUALITY,
        sink: Optional[Any] = None,
    ) -> None:
        """Write the current image to the output sink."""
        self.export(export_format, quality, None, sink=sink)

    # ------------------------------------------------------------------
    # Geometric transforms
    # ------------------------------------------------------------------

    def scale(self, factor: Any = 1) -> "ImageSession":
        """Scale by a multiplier or a "NN%" string."""
        return self._replace(geometry_ops.scale(self._require_buffer(), factor))

    def resize(self, dimensions: Any, policy: ResizePolicy = POLICY_FIT) -> "ImageSession":
        """
        Resize to a width, a height, or a width x height box.

        Args:
            dimensions: int width, [width], [None, height], (width, height)
                        or a ResizeSpec
            policy: "fit", "cover" or "stretch" when both dimensions are set

        Raises:
            InvalidDimensionsError: If dimensions are empty, zero or negative
        """
        buffer = self._require_buffer()
        spec = resize_spec_from_dimensions(dimensions, policy)
        return self._replace(geometry_ops.resize(buffer, spec))

    def rotate(self, angle: float = 0, background: Any = DEFAULT_ROTATE_BACKGROUND) -> "ImageSession":
        """Rotate counter-clockwise by angle degrees."""
        return self._replace(geometry_ops.rotate(self._require_buffer(), angle, background))

    def rotate_clockwise(self, angle: float = 0, background: Any = DEFAULT_ROTATE_BACKGROUND) -> "ImageSession":
        return self.rotate(-float(angle), background)

    def rotate_counterclockwise(self, angle: float = 0, background: Any = DEFAULT_ROTATE_BACKGROUND) -> "ImageSession":
        return self.rotate(angle, background)

    def rotate_right(self, background: Any = DEFAULT_ROTATE_BACKGROUND) -> "ImageSession":
        return self.rotate(-90, background)

    def rotate_left(self, background: Any = DEFAULT_ROTATE_BACKGROUND) -> "ImageSession":
        return self.rotate(90, background)

    def flip(self, axis: str = AXIS_BOTH) -> "ImageSession":
        return self._replace(geometry_ops.flip(self._require_buffer(), axis))

    def flip_vertical(self) -> "ImageSession":
        return self._replace(geometry_ops.flip_vertical(self._require_buffer()))

    def flip_horizontal(self) -> "ImageSession":
        return self._replace(geometry_ops.flip_horizontal(self._require_buffer()))

    # ------------------------------------------------------------------
    # Tone transforms and filters (dimensions unchanged)
    # ------------------------------------------------------------------

    def _apply_filter(self, operation: Any, *args: Any) -> "ImageSession":
        return self._replace(operation(self._require_buffer(), *args), geometric=False)

    def grayscale(self) -> "ImageSession":
        return self._apply_filter(tone_ops.grayscale)

    def monochrome(self, white: Any = WHITE, black: Any = BLACK) -> "ImageSession":
        """Duotone remap between a white color and a black color."""
        return self._apply_filter(tone_ops.monochrome, white, black)

    def negative(self) -> "ImageSession":
        return self._apply_filter(filter_ops.negative)

    def brightness(self, amount: int = 0) -> "ImageSession":
        return self._apply_filter(filter_ops.brightness, amount)

    def contrast(self, amount: int = 0) -> "ImageSession":
        return self._apply_filter(filter_ops.contrast, amount)

    def colorize(self, color: Any = DEFAULT_COLORIZE_COLOR) -> "ImageSession":
        return self._apply_filter(filter_ops.colorize, color)

    def edge_detect(self) -> "ImageSession":
        return self._apply_filter(filter_ops.edge_detect)

    def emboss(self) -> "ImageSession":
        return self._apply_filter(filter_ops.emboss)

    def blur(self, amount: int = 1) -> "ImageSession":
        return self._apply_filter(filter_ops.blur, amount)

    def selective_blur(self, amount: int = 1) -> "ImageSession":
        return self._apply_filter(filter_ops.selective_blur, amount)

    def remove_mean(self) -> "ImageSession":
        return self._apply_filter(filter_ops.remove_mean)

    def smooth(self, weight: int = 0) -> "ImageSession":
        return self._apply_filter(filter_ops.smooth, weight)

    def pixelate(self, block_size: int = 1, advanced: bool = True) -> "ImageSession":
        return self._apply_filter(filter_ops.pixelate, block_size, advanced)
