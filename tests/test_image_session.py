"""
Tests for Image Session.

Tests cover:
- Loading files and the load error paths
- Metadata updates after geometric transforms only
- Failed transforms leaving the buffer untouched
- Chaining
- Export to files and to an output sink
"""

import unittest
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.SessionLib import ImageSession, StreamSink
from IK_Libs.errors import (
    DecodeFailedError,
    InvalidColorError,
    InvalidDimensionsError,
    NotLoadedError,
    TransformFailedError,
    UnsupportedFormatError,
)


class TestUnloadedSession(unittest.TestCase):
    """Operations on a session without an image."""

    def setUp(self):
        self.session = ImageSession()

    def test_is_not_loaded(self):
        """Test a new session has no image."""
        self.assertFalse(self.session.is_loaded)

    def test_metadata_access_raises(self):
        """Test metadata needs a loaded image."""
        with self.assertRaises(NotLoadedError):
            _ = self.session.width

    def test_transforms_raise(self):
        """Test transforms need a loaded image."""
        for call in (
            lambda: self.session.resize([10, 10]),
            lambda: self.session.rotate(90),
            lambda: self.session.grayscale(),
            lambda: self.session.flip(),
            lambda: self.session.export("png", 90, "out.png"),
        ):
            with self.assertRaises(NotLoadedError):
                call()


class TestLoad:
    """Test ImageSession.load."""

    def test_load_png(self, sample_image_file):
        """Test loading a PNG."""
        session = ImageSession(sample_image_file)

        assert session.is_loaded
        assert (session.width, session.height) == (16, 8)
        assert session.orientation == "landscape"
        assert session.aspect == 2.0
        assert session.source.filename == "sample.png"
        assert session.source.format == "PNG"
        assert session.source.mime_type == "image/png"

    def test_load_jpeg(self, sample_jpeg_file):
        """Test loading a JPEG."""
        session = ImageSession().load(sample_jpeg_file)
        assert session.buffer.image.mode == "RGBA"
        assert session.source.format == "JPEG"

    def test_missing_file(self, tmp_path):
        """Test loading a missing file."""
        with pytest.raises(FileNotFoundError):
            ImageSession(tmp_path / "missing.png")

    def test_directory_is_not_loadable(self, tmp_path):
        """Test loading a directory."""
        with pytest.raises(FileNotFoundError):
            ImageSession(tmp_path)

    def test_garbage_file(self, tmp_path):
        """Test loading a file that is not an image."""
        path = tmp_path / "broken.png"
        path.write_bytes(b"this is not an image")

        with pytest.raises(DecodeFailedError):
            ImageSession(path)

    def test_unsupported_format(self, tmp_path):
        """Test loading an unsupported format."""
        path = tmp_path / "image.tiff"
        Image.new("RGB", (4, 4)).save(path, format="TIFF")

        with pytest.raises(UnsupportedFormatError):
            ImageSession(path)

    def test_first_frame_of_animated_gif(self, tmp_path):
        """Test animated GIFs load their first frame."""
        path = tmp_path / "anim.gif"
        frames = [Image.new("RGB", (6, 4), color) for color in ((255, 0, 0), (0, 0, 255))]
        frames[0].save(path, format="GIF", save_all=True, append_images=frames[1:])

        session = ImageSession(path)

        assert session.buffer.size == (6, 4)
        red, green, blue, _ = session.buffer.getpixel(0, 0)
        assert red > 200 and blue < 50

    def test_failed_load_keeps_previous_image(self, sample_image_file, tmp_path):
        """Test a failed load keeps the current image."""
        session = ImageSession(sample_image_file)
        buffer = session.buffer

        with pytest.raises(FileNotFoundError):
            session.load(tmp_path / "missing.png")

        assert session.buffer is buffer


class TestTransforms(unittest.TestCase):
    """Test transform behavior on an in-memory session."""

    def setUp(self):
        self.session = ImageSession.from_buffer(PixelBuffer.new(400, 100, (200, 100, 50, 255)), "banner.png")

    def test_from_buffer_source(self):
        """Test sessions built from a buffer."""
        self.assertIsNone(self.session.source.path)
        self.assertEqual(self.session.source.format, "PNG")
        self.assertEqual((self.session.width, self.session.height), (400, 100))

    def test_resize_fit(self):
        """Test session fit resize."""
        self.session.resize((200, 200), "fit")
        self.assertEqual((self.session.width, self.session.height), (200, 50))

    def test_resize_cover(self):
        """Test session cover resize."""
        self.session.resize((200, 200), "cover")
        self.assertEqual((self.session.width, self.session.height), (200, 200))
        self.assertEqual(self.session.orientation, "square")

    def test_resize_height_only(self):
        """Test session height-only resize."""
        self.session.resize([None, 50])
        self.assertEqual((self.session.width, self.session.height), (200, 50))

    def test_rotate_helpers(self):
        """Test rotate_left and rotate_right."""
        self.session.rotate_right()
        self.assertEqual((self.session.width, self.session.height), (100, 400))
        self.assertEqual(self.session.orientation, "portrait")
        self.session.rotate_left()
        self.assertEqual((self.session.width, self.session.height), (400, 100))

    def test_rotate_clockwise_is_negative_angle(self):
        """Test clockwise rotation negates the angle."""
        buffer = PixelBuffer.from_pixels(2, 1, [(1, 0, 0, 255), (2, 0, 0, 255)])
        session = ImageSession.from_buffer(buffer)

        session.rotate_clockwise(90)

        # Clockwise puts the left pixel on top
        self.assertEqual(session.buffer.getpixel(0, 0)[0], 1)

    def test_chaining_returns_session(self):
        """Test transforms return the session."""
        result = self.session.scale("50%").grayscale().flip("h").monochrome("#FFF", "#223")
        self.assertIs(result, self.session)
        self.assertEqual((self.session.width, self.session.height), (200, 50))

    def test_filters_keep_metadata_object(self):
        """Test filters keep the metadata."""
        metadata = self.session.metadata
        self.session.grayscale().negative().blur(1).pixelate(4)

        self.assertIs(self.session.metadata, metadata)

    def test_geometric_transforms_replace_metadata(self):
        """Test geometric transforms refresh metadata."""
        metadata = self.session.metadata
        self.session.flip_vertical()

        self.assertIsNot(self.session.metadata, metadata)

    def test_invalid_dimensions_leave_buffer(self):
        """Test bad dimensions keep the buffer."""
        buffer = self.session.buffer
        with self.assertRaises(InvalidDimensionsError):
            self.session.resize([0, 0])
        with self.assertRaises(InvalidDimensionsError):
            self.session.scale(-1)

        self.assertIs(self.session.buffer, buffer)

    def test_invalid_color_leaves_buffer(self):
        """Test bad colors keep the buffer."""
        buffer = self.session.buffer
        with self.assertRaises(InvalidColorError):
            self.session.rotate(45, "nope")
        with self.assertRaises(InvalidColorError):
            self.session.colorize("transparent")

        self.assertIs(self.session.buffer, buffer)

    def test_failed_filter_leaves_buffer(self):
        """Test a failing filter keeps the buffer."""
        buffer = self.session.buffer
        with self.assertRaises(TransformFailedError):
            self.session.smooth(-8)

        self.assertIs(self.session.buffer, buffer)

    def test_all_filters_run(self):
        """Test every filter runs on a session."""
        (self.session
            .brightness(10)
            .contrast(10)
            .colorize("#010203")
            .edge_detect()
            .emboss()
            .selective_blur(1)
            .remove_mean()
            .smooth(2))

        self.assertEqual(self.session.buffer.size, (400, 100))


class TestExport:
    """Test ImageSession.export and display."""

    def test_export_to_directory(self, sample_jpeg_file, tmp_path):
        """Test export into a directory."""
        session = ImageSession(sample_jpeg_file).resize((20, 20), "cover")
        output = session.export("png", 90, tmp_path / "thumbs")

        assert output == tmp_path / "thumbs" / "photo.png"
        with Image.open(output) as img:
            assert img.size == (20, 20)

    def test_export_overwrites_source_by_default(self, sample_image_file):
        """Test export overwrites the source by default."""
        session = ImageSession(sample_image_file).resize([8])
        output = session.export("png", 100)

        assert output == sample_image_file
        with Image.open(sample_image_file) as img:
            assert img.size == (8, 4)

    def test_export_without_source_needs_destination(self):
        """Test export without a source needs a destination."""
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2))
        with pytest.raises(ValueError):
            session.export("png")

    def test_display_writes_to_sink(self):
        """Test display writes to the sink."""
        stream = BytesIO()
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2, (1, 2, 3, 255)))

        session.display("png", 80, sink=StreamSink(stream))

        assert stream.getvalue().startswith(b"Content-Type: image/png\r\n\r\n\x89PNG")

    def test_export_none_destination_uses_sink(self):
        """Test a None destination writes to the sink."""
        stream = BytesIO()
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2, (1, 2, 3, 255)))

        result = session.export("jpg", 50, None, sink=StreamSink(stream, emit_header=False))

        assert result is None
        assert stream.getvalue().startswith(b"\xff\xd8")

    def test_unsupported_export_format(self, tmp_path):
        """Test an unsupported export format."""
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2))
        with pytest.raises(UnsupportedFormatError):
            session.export("tiff", 50, tmp_path / "out.tiff")

    def test_transform_after_export(self, sample_image_file, tmp_path):
        """Test transforms still work after export."""
        session = ImageSession(sample_image_file)
        session.export("png", 50, tmp_path / "a.png")
        session.rotate(90)

        assert (session.width, session.height) == (8, 16)

    def test_metadata_survives_failed_export(self, tmp_path):
        """Test a failed export keeps metadata."""
        session = ImageSession.from_buffer(PixelBuffer.new(4, 2))
        with pytest.raises(UnsupportedFormatError):
            session.export("tga", 50, tmp_path)

        assert list(Path(tmp_path).iterdir()) == []
        assert (session.width, session.height) == (4, 2)
