"""
Per-format codecs.

A closed set of codec values, one per supported ImageType, looked up by the
type tag detected from the file header. Pixel work is delegated to Pillow.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Mapping

import numpy as np
from PIL import Image, UnidentifiedImageError

from imgderive.core.constants import CodecConstants
from imgderive.core.enums import ImageType
from imgderive.core.exceptions import (
    EncodeError,
    SourceNotFoundError,
    UnreadableImageError,
    UnsupportedFormatError,
)
from imgderive.core.file_store import FileStore
from imgderive.core.image.converters import bitmap_to_pil, pil_to_bitmap
from imgderive.schemas.common import SourceInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Codec:
    """Decoder/encoder for one image type."""

    image_type: ImageType
    extension: str
    mime: str
    keeps_alpha: bool
    save_options: Dict[str, Any] = field(default_factory=dict)

    def decode(self, stream: BinaryIO) -> np.ndarray:
        """
        Decode an image stream into an RGBA bitmap.

        Raises:
            UnreadableImageError: If the data is corrupt or not an image
            UnsupportedFormatError: If the data is another format
        """
        try:
            with Image.open(stream) as image:
                if image.format != self.image_type.value:
                    raise UnsupportedFormatError(
                        f"{self.image_type.value} codec cannot decode {image.format}"
                    )
                image.load()
                return pil_to_bitmap(image)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise UnreadableImageError(f"Failed to decode {self.image_type.value}: {e}") from e

    def encode(self, bitmap: np.ndarray) -> bytes:
        """
        Encode a bitmap to bytes in this format.

        Alpha-capable formats keep the alpha channel so padding stays
        transparent; the others drop it.

        Raises:
            EncodeError: If Pillow fails to encode
        """
        try:
            image = bitmap_to_pil(bitmap, keep_alpha=self.keeps_alpha)
            buffer = io.BytesIO()
            image.save(buffer, format=self.image_type.value, **self.save_options)
            return buffer.getvalue()
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode {self.image_type.value}: {e}") from e


def build_codecs(
    jpeg_quality: int = CodecConstants.JPEG_QUALITY,
    png_compress_level: int = CodecConstants.PNG_COMPRESS_LEVEL,
) -> Dict[ImageType, Codec]:
    """
    Build the codec registry.

    Args:
        jpeg_quality: JPEG quality (1-95)
        png_compress_level: zlib level for PNG (0-9)

    Returns:
        Mapping from ImageType to Codec
    """
    return {
        ImageType.JPEG: Codec(
            image_type=ImageType.JPEG,
            extension=".jpg",
            mime="image/jpeg",
            keeps_alpha=False,
            save_options={"quality": jpeg_quality},
        ),
        ImageType.PNG: Codec(
            image_type=ImageType.PNG,
            extension=".png",
            mime="image/png",
            keeps_alpha=True,
            save_options={"compress_level": png_compress_level},
        ),
        ImageType.GIF: Codec(
            image_type=ImageType.GIF,
            extension=".gif",
            mime="image/gif",
            keeps_alpha=True,
        ),
        ImageType.BMP: Codec(
            image_type=ImageType.BMP,
            extension=".bmp",
            mime="image/bmp",
            keeps_alpha=False,
        ),
    }


CODECS: Dict[ImageType, Codec] = build_codecs()


def codec_for(image_type, codecs: Mapping[ImageType, Codec] = None) -> Codec:
    """
    Look up the codec for a type tag.

    Args:
        image_type: ImageType or Pillow format name (e.g. "PNG")
        codecs: Registry to search (default: CODECS)

    Raises:
        UnsupportedFormatError: If no codec matches
    """
    codecs = codecs if codecs is not None else CODECS
    try:
        return codecs[ImageType(image_type)]
    except (ValueError, KeyError):
        raise UnsupportedFormatError(f"No codec for image type {image_type!r}") from None


def read_source_info(store: FileStore, path: str) -> SourceInfo:
    """
    Read size and type from the image header without decoding pixels.

    Args:
        store: File store to read through
        path: Image path

    Returns:
        SourceInfo (image_type is None for formats without a codec)

    Raises:
        SourceNotFoundError: If the file does not exist
        UnreadableImageError: If the file cannot be opened or is not an image
    """
    if not store.exists(path):
        raise SourceNotFoundError(f"File {path} does not exist", path)

    try:
        with store.open(path) as fh:
            with Image.open(fh) as image:
                format_name = image.format or ""
                width, height = image.size
    except FileNotFoundError as e:
        raise SourceNotFoundError(f"File {path} does not exist", path) from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise UnreadableImageError(f"File {path} is not a readable image: {e}", path) from e

    try:
        image_type = ImageType(format_name)
    except ValueError:
        image_type = None

    return SourceInfo(
        width=width,
        height=height,
        image_type=image_type,
        format_name=format_name,
        mime=Image.MIME.get(format_name, ""),
    )
