"""
Image Handle - a decoded image with its metadata and codec.

Every operation returns a new bitmap; the handle's own bitmap is never
modified. Use the handle as a context manager so the decoded bitmap is
released on every exit path.
"""

import logging
import sys
from typing import BinaryIO, Mapping, Optional, Tuple

import numpy as np

from imgderive.core.constants import GeometryConstants, RoundedConstants
from imgderive.core.enums import CutAnchor, ImageType
from imgderive.core.exceptions import (
    EncodeError,
    SourceNotFoundError,
    UnreadableImageError,
    UnsupportedFormatError,
)
from imgderive.core.file_store import FileStore
from imgderive.core.format_classifier import FormatDecision, plan_decision
from imgderive.core.geometry import (
    plan_adapt,
    plan_fit,
    plan_reduce,
    plan_resample,
    plan_resize,
    plan_resize_rotate,
    plan_thumb,
)
from imgderive.core.image.codecs import Codec, codec_for, read_source_info
from imgderive.core.image.converters import bitmap_size, ensure_rgba
from imgderive.core.image.processors import Color, execute_plan, rotate
from imgderive.core.rounded import round_corners
from imgderive.schemas.common import Dimensions, SourceInfo

logger = logging.getLogger(__name__)


class ImageHandle:
    """Decoded image plus the SourceInfo captured at load time."""

    def __init__(self, bitmap: np.ndarray, info: SourceInfo, codec: Codec):
        self._bitmap: Optional[np.ndarray] = bitmap
        self._info = info
        self._codec = codec

    @classmethod
    def make(
        cls, store: FileStore, path: str, codecs: Mapping[ImageType, Codec] = None
    ) -> "ImageHandle":
        """
        Load an image through a file store.

        Args:
            store: File store to read through
            path: Image path (including any document root prefix)
            codecs: Codec registry (default: built-in codecs)

        Returns:
            ImageHandle owning the decoded bitmap

        Raises:
            SourceNotFoundError: File is missing
            UnreadableImageError: File is not a readable image or is empty
            UnsupportedFormatError: Type tag has no codec
        """
        info = read_source_info(store, path)

        if info.image_type is None:
            raise UnsupportedFormatError(f"Unsupported image type {info.format_name!r}", path)

        if info.is_empty:
            raise UnreadableImageError(f"Image {path} has no pixels", path)

        codec = codec_for(info.image_type, codecs)

        try:
            with store.open(path) as fh:
                bitmap = codec.decode(fh)
        except FileNotFoundError as e:
            raise SourceNotFoundError(f"File {path} does not exist", path) from e

        logger.debug(f"Loaded {info.format_name} {info.width}x{info.height} from {path}")
        return cls(bitmap, info, codec)

    @classmethod
    def from_bitmap(
        cls,
        bitmap: np.ndarray,
        image_type: ImageType = ImageType.PNG,
        codecs: Mapping[ImageType, Codec] = None,
    ) -> "ImageHandle":
        """Wrap an in-memory bitmap (grayscale, RGB or RGBA array)."""
        bitmap = ensure_rgba(bitmap)
        codec = codec_for(image_type, codecs)
        size = bitmap_size(bitmap)
        info = SourceInfo(
            width=size.width,
            height=size.height,
            image_type=image_type,
            format_name=image_type.value,
            mime=codec.mime,
        )
        return cls(bitmap, info, codec)

    def __enter__(self) -> "ImageHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the decoded bitmap."""
        self._bitmap = None

    @property
    def bitmap(self) -> np.ndarray:
        if self._bitmap is None:
            raise ValueError("Image handle is closed")
        return self._bitmap

    @property
    def info(self) -> SourceInfo:
        return self._info

    @property
    def codec(self) -> Codec:
        return self._codec

    @property
    def size(self) -> Dimensions:
        return self._info.size

    @property
    def width(self) -> int:
        return self._info.width

    @property
    def height(self) -> int:
        return self._info.height

    @property
    def mime(self) -> str:
        return self._info.mime or self._codec.mime

    def in_width(self, width: int) -> bool:
        """Check if the image is no wider than width."""
        return width >= self.width

    def in_height(self, height: int) -> bool:
        """Check if the image is no taller than height."""
        return height >= self.height

    def is_width(self, width: int) -> bool:
        return width == self.width

    def is_height(self, height: int) -> bool:
        return height == self.height

    # Geometry operations

    def reduce(self, width: int, sharp: bool = False) -> np.ndarray:
        """Shrink to width if wider; otherwise an unchanged copy."""
        return execute_plan(self.bitmap, plan_reduce(self.size, width), sharp=sharp)

    def resize(self, width: int, sharp: bool = False) -> np.ndarray:
        """Scale (up or down) to width, preserving aspect ratio."""
        return execute_plan(self.bitmap, plan_resize(self.size, width), sharp=sharp)

    def fit(self, width: int, height: int = 0, sharp: bool = False) -> np.ndarray:
        """Fit inside a width x height box without upscaling."""
        return execute_plan(self.bitmap, plan_fit(self.size, width, height), sharp=sharp)

    def thumb(self, w: int, h: int, sharp: bool = False) -> np.ndarray:
        """Letterbox into exactly w x h with transparent padding."""
        return execute_plan(self.bitmap, plan_thumb(self.size, w, h), sharp=sharp)

    def adapt(
        self, w: int, h: int, anchor: CutAnchor = CutAnchor.CENTER, sharp: bool = False
    ) -> np.ndarray:
        """Fill exactly w x h, cropping overflow per anchor."""
        return execute_plan(self.bitmap, plan_adapt(self.size, w, h, anchor), sharp=sharp)

    def resampled(self, width: int, height: int, sharp: bool = False) -> np.ndarray:
        """Scale to exactly width x height, ignoring aspect ratio."""
        return execute_plan(self.bitmap, plan_resample(self.size, width, height), sharp=sharp)

    def rotate(
        self, degrees: float, background: Color = GeometryConstants.ROTATE_BACKGROUND
    ) -> np.ndarray:
        """Rotate counter-clockwise; the canvas grows to fit."""
        return rotate(self.bitmap, degrees, background)

    def resize_rotate(
        self,
        width: int,
        threshold: float = GeometryConstants.DEFAULT_ROTATE_THRESHOLD,
        sharp: bool = True,
    ) -> np.ndarray:
        """
        Rotate portrait images 90 degrees, then resize to width.

        Samples nearest-neighbour unless sharp is False.
        """
        turn, plan = plan_resize_rotate(self.size, width, threshold)
        bitmap = rotate(self.bitmap, 90) if turn else self.bitmap
        return execute_plan(bitmap, plan, sharp=sharp)

    def rounded(
        self,
        radius: int = RoundedConstants.DEFAULT_RADIUS,
        rate: int = RoundedConstants.DEFAULT_RATE,
        bitmap: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Round the corners of bitmap (default: this image)."""
        return round_corners(self.bitmap if bitmap is None else bitmap, radius, rate)

    def apply(
        self,
        decision: FormatDecision,
        anchor: CutAnchor = CutAnchor.CENTER,
        sharp: bool = False,
    ) -> np.ndarray:
        """Run the transform chosen by the format classifier."""
        return execute_plan(self.bitmap, plan_decision(decision, anchor), sharp=sharp)

    # Output

    def encode(self, bitmap: np.ndarray) -> bytes:
        """Encode bitmap with this image's codec."""
        return self._codec.encode(bitmap)

    def render(self, bitmap: Optional[np.ndarray] = None) -> Tuple[bytes, str]:
        """
        Encode for an HTTP response.

        Returns:
            Tuple of (encoded bytes, MIME type)
        """
        return self.encode(self.bitmap if bitmap is None else bitmap), self.mime

    def save(self, bitmap: np.ndarray, store: FileStore, path: str) -> None:
        """
        Encode bitmap and write it to path.

        Encoding finishes before the store is touched, so a failed encode
        never leaves a file behind.

        Raises:
            EncodeError: If encoding or writing fails
        """
        data = self.encode(bitmap)
        try:
            store.write_bytes(path, data)
        except OSError as e:
            raise EncodeError(f"Failed to write {path}: {e}", path) from e

        logger.debug(f"Saved {bitmap.shape[1]}x{bitmap.shape[0]} image to {path}")

    def send(self, bitmap: Optional[np.ndarray] = None, stream: Optional[BinaryIO] = None) -> None:
        """
        Write a Content-type header block and the encoded image to a stream.

        Args:
            bitmap: Bitmap to send (default: this image unchanged)
            stream: Binary stream (default: standard output)
        """
        data, mime = self.render(bitmap)
        stream = stream if stream is not None else sys.stdout.buffer
        try:
            stream.write(f"Content-type: {mime}\r\n\r\n".encode("ascii"))
            stream.write(data)
            stream.flush()
        except OSError as e:
            raise EncodeError(f"Failed to write image to stream: {e}") from e

    def show(self, stream: Optional[BinaryIO] = None) -> None:
        """Send this image unchanged."""
        self.send(None, stream)
