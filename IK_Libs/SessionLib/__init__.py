"""
SessionLib - Image sessions and export

This module holds the ImageSession (load, transform chain, export) and
the export handling that encodes buffers with Pillow.
"""

from IK_Libs.SessionLib.export_handler import (
    SOURCE_PATH,
    ExportConfig,
    ExportHandler,
    StreamSink,
    png_compress_level,
    resolve_pillow_format,
)
from IK_Libs.SessionLib.image_session import ImageSession, decode_image

__all__ = [
    "SOURCE_PATH",
    "ExportConfig",
    "ExportHandler",
    "StreamSink",
    "png_compress_level",
    "resolve_pillow_format",
    "ImageSession",
    "decode_image",
]
