"""
Unit tests for codecs and header probing
"""

import io

import numpy as np
import pytest
from PIL import Image

from imgderive.core.enums import ImageType
from imgderive.core.exceptions import (
    SourceNotFoundError,
    UnreadableImageError,
    UnsupportedFormatError,
)
from imgderive.core.image.codecs import CODECS, build_codecs, codec_for, read_source_info


@pytest.fixture
def half_transparent():
    """Create an RGBA bitmap whose left half is fully transparent"""
    bitmap = np.zeros((20, 40, 4), dtype=np.uint8)
    bitmap[:, :] = (10, 200, 10, 255)
    bitmap[:, :20, 3] = 0
    return bitmap


class TestCodecRegistry:
    """Test codec lookup"""

    def test_closed_registry(self):
        """Test one codec per supported type"""
        assert set(CODECS) == {ImageType.JPEG, ImageType.PNG, ImageType.GIF, ImageType.BMP}

    def test_lookup_by_name(self):
        """Test lookup by Pillow format name"""
        assert codec_for("PNG").mime == "image/png"
        assert codec_for(ImageType.JPEG).extension == ".jpg"

    def test_unknown_type_raises(self):
        """Test unknown tags are rejected"""
        with pytest.raises(UnsupportedFormatError):
            codec_for("TIFF")

    def test_build_codecs_options(self):
        """Test encoder options come from the arguments"""
        codecs = build_codecs(jpeg_quality=90, png_compress_level=1)
        assert codecs[ImageType.JPEG].save_options == {"quality": 90}
        assert codecs[ImageType.PNG].save_options == {"compress_level": 1}


class TestEncodeDecode:
    """Test Pillow-backed encode and decode"""

    def test_png_keeps_alpha(self, half_transparent):
        """Test PNG preserves transparency"""
        codec = codec_for(ImageType.PNG)
        decoded = codec.decode(io.BytesIO(codec.encode(half_transparent)))

        assert decoded.shape == (20, 40, 4)
        assert decoded[0, 0, 3] == 0
        assert decoded[0, 39, 3] == 255

    def test_jpeg_drops_alpha(self, half_transparent):
        """Test JPEG output is opaque"""
        codec = codec_for(ImageType.JPEG)
        data = codec.encode(half_transparent)

        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"

        assert (codec.decode(io.BytesIO(data))[:, :, 3] == 255).all()

    def test_bmp_encodes(self, half_transparent):
        """Test BMP output decodes to the same size"""
        codec = codec_for(ImageType.BMP)
        assert codec.decode(io.BytesIO(codec.encode(half_transparent))).shape == (20, 40, 4)

    def test_decode_garbage_raises(self):
        """Test non-image data is unreadable"""
        with pytest.raises(UnreadableImageError):
            codec_for(ImageType.PNG).decode(io.BytesIO(b"definitely not a png"))

    def test_decode_wrong_format_raises(self, make_image):
        """Test a codec refuses another format's data"""
        with pytest.raises(UnsupportedFormatError):
            codec_for(ImageType.JPEG).decode(io.BytesIO(make_image(10, 10, "PNG")))


class TestReadSourceInfo:
    """Test header-only probing"""

    def test_png_info(self, memory_store):
        """Test size, type and MIME from the header"""
        info = read_source_info(memory_store, "img/wide.png")

        assert (info.width, info.height) == (400, 200)
        assert info.image_type == ImageType.PNG
        assert info.mime == "image/png"

    def test_jpeg_info(self, memory_store):
        """Test JPEG header"""
        info = read_source_info(memory_store, "img/photo.jpg")
        assert info.image_type == ImageType.JPEG
        assert info.mime == "image/jpeg"

    def test_unsupported_format_has_no_type(self, memory_store, make_image):
        """Test formats without a codec are reported with no type tag"""
        memory_store.write_bytes("img/scan.tiff", make_image(30, 20, "TIFF"))
        info = read_source_info(memory_store, "img/scan.tiff")

        assert info.image_type is None
        assert info.format_name == "TIFF"
        assert (info.width, info.height) == (30, 20)

    def test_missing_file(self, memory_store):
        """Test missing files raise SourceNotFoundError"""
        with pytest.raises(SourceNotFoundError):
            read_source_info(memory_store, "img/missing.png")

    def test_not_an_image(self, memory_store):
        """Test text and empty files are unreadable"""
        with pytest.raises(UnreadableImageError):
            read_source_info(memory_store, "img/notes.txt")
        with pytest.raises(UnreadableImageError):
            read_source_info(memory_store, "img/empty.png")
