"""
Export handling for ImageKit.

Encodes a PixelBuffer with Pillow and writes it either to a file or to an
output sink (standard output by default).

Destination rules:
- SOURCE_PATH (the default) overwrites the file the image was loaded from
- None writes to the output sink, content type first
- A path without an extension is a directory; the source filename is appended
- A known image extension is rewritten to match the export format

Quality rules:
- JPEG / WEBP: 0-100 used directly (clamped)
- PNG: 0-100 inverted into compression levels 9-0
- GIF / BMP: quality is ignored

Classes:
    ExportConfig: Format, quality and directory options
    StreamSink: Output sink writing to a binary stream
    ExportHandler: Resolves destinations and encodes buffers
"""

from dataclasses import asdict, dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import sys

from IK_Libs.ImageEditingLib.image_models import ImageSource
from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.constants import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_QUALITY,
    EXPORT_FORMATS,
    FORMAT_EXTENSION_ALIASES,
    FORMAT_EXTENSIONS,
    FORMAT_MIME_TYPES,
    MAX_PNG_COMPRESS_LEVEL,
    MAX_QUALITY,
    MIN_PNG_COMPRESS_LEVEL,
    MIN_QUALITY,
    OPAQUE_ONLY_FORMATS,
)
from IK_Libs.errors import EncodeFailedError, UnsupportedFormatError
from IK_Libs.rounding import clamp, round_half_up

logger = logging.getLogger(__name__)

_KNOWN_EXTENSIONS = set().union(*FORMAT_EXTENSION_ALIASES.values())


class _SourcePath:
    def __repr__(self) -> str:
        return "SOURCE_PATH"


SOURCE_PATH = _SourcePath()


def png_compress_level(quality: int) -> int:
    """Map 0-100 quality onto PNG compression: 100 -> 0, 0 -> 9."""
    level = 10 - round_half_up(quality / 10)
    return clamp(level, MIN_PNG_COMPRESS_LEVEL, MAX_PNG_COMPRESS_LEVEL)


def resolve_pillow_format(export_format: str) -> str:
    """
    Map an export format name ("jpg", "png", ...) to Pillow's format name.

    Raises:
        UnsupportedFormatError: If the format is not supported
    """
    key = str(export_format).strip().lower().lstrip(".")
    if key not in EXPORT_FORMATS:
        valid = ", ".join(sorted(EXPORT_FORMATS))
        raise UnsupportedFormatError(f"Unsupported export format: {export_format}. Use one of: {valid}")
    return EXPORT_FORMATS[key]


@dataclass
class ExportConfig:
    """Configuration for an export.

    Attributes:
        export_format: Format name: jpg, jpeg, png, gif, webp or bmp (default: jpg)
        quality: Quality 0-100, interpreted per format (default: 50)
        create_directories: Create missing parent directories (default: True)
    """
    export_format: str = DEFAULT_EXPORT_FORMAT
    quality: int = DEFAULT_EXPORT_QUALITY
    create_directories: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    @property
    def pillow_format(self) -> str:
        return resolve_pillow_format(self.export_format)

    @property
    def extension(self) -> str:
        return FORMAT_EXTENSIONS[self.pillow_format]

    @property
    def mime_type(self) -> str:
        return FORMAT_MIME_TYPES[self.pillow_format]

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        save_format = self.pillow_format
        kwargs: Dict[str, Any] = {"format": save_format}
        quality = int(self.quality)

        if save_format in ("JPEG", "WEBP"):
            kwargs["quality"] = clamp(quality, MIN_QUALITY, MAX_QUALITY)
        elif save_format == "PNG":
            kwargs["compress_level"] = png_compress_level(quality)

        return kwargs


class StreamSink:
    """Output sink that writes encoded images to a binary stream.

    When emit_header is set, a "Content-Type" header block is written
    before the image bytes.
    """

    def __init__(self, stream: Optional[Any] = None, emit_header: bool = True):
        self._stream = stream
        self.emit_header = emit_header

    @property
    def stream(self) -> Any:
        if self._stream is None:
            return sys.stdout.buffer
        return self._stream

    def declare_content_type(self, mime_type: str) -> None:
        if self.emit_header:
            self.stream.write(f"Content-Type: {mime_type}\r\n\r\n".encode("ascii"))

    def write(self, data: bytes) -> None:
        self.stream.write(data)
        if hasattr(self.stream, "flush"):
            self.stream.flush()


class ExportHandler:
    """Resolves export destinations and encodes buffers with Pillow."""

    def __init__(self, config: ExportConfig):
        self.config = config
        # Fail early on unknown formats
        self._format = config.pillow_format

    def resolve_destination(self, destination: Any, source: Optional[ImageSource]) -> Path:
        """
        Resolve the file an export writes to.

        Args:
            destination: SOURCE_PATH, a file path, or a directory path
            source: Where the image was loaded from

        Returns:
            The output file path, extension matched to the export format

        Raises:
            ValueError: If SOURCE_PATH is used for an image without a source file
        """
        if destination is SOURCE_PATH:
            if source is None or source.path is None:
                raise ValueError("Image was not loaded from a file; pass an explicit destination")
            path = Path(source.path)
        else:
            path = Path(destination)

        if not path.suffix:
            filename = source.filename if source is not None else f"image{self.config.extension}"
            path = path / filename

        return self._match_extension(path)

    def _match_extension(self, path: Path) -> Path:
        suffix = path.suffix.lower()
        if suffix in _KNOWN_EXTENSIONS and suffix not in FORMAT_EXTENSION_ALIASES[self._format]:
            return path.with_suffix(self.config.extension)
        return path

    def prepare_image(self, buffer: PixelBuffer) -> Any:
        """Copy the buffer's image into a mode the target format can store."""
        if self._format in OPAQUE_ONLY_FORMATS:
            return buffer.image.convert("RGB")
        return buffer.to_image()

    def encode(self, buffer: PixelBuffer) -> bytes:
        """
        Encode a buffer to bytes.

        Raises:
            EncodeFailedError: If Pillow cannot encode the image
        """
        output = BytesIO()
        try:
            self.prepare_image(buffer).save(output, **self.config.get_save_kwargs())
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeFailedError(f"Failed to encode image as {self._format}: {exc}") from exc
        return output.getvalue()

    def save(self, buffer: PixelBuffer, destination: Any, source: Optional[ImageSource]) -> Path:
        """
        Write a buffer to disk.

        Returns:
            Path where the image was saved

        Raises:
            EncodeFailedError: If the file cannot be written
        """
        output_file = self.resolve_destination(destination, source)

        if self.config.create_directories:
            output_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            self.prepare_image(buffer).save(output_file, **self.config.get_save_kwargs())
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeFailedError(f"Failed to save image to {output_file}: {exc}") from exc

        logger.info(f"Exported {buffer.width}x{buffer.height} {self._format} to {output_file}")
        return output_file

    def write_to_sink(self, buffer: PixelBuffer, sink: Any) -> None:
        """Encode a buffer and write it to a sink, content type first."""
        data = self.encode(buffer)
        sink.declare_content_type(self.config.mime_type)
        sink.write(data)
        logger.info(f"Wrote {len(data)} bytes of {self.config.mime_type} to output sink")
