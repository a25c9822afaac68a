"""
Derivative Service - top-level entry points for derived images.

Each entry point computes a deterministic derived path, returns it at once
when the artifact already exists (optionally checking its size), and
otherwise decodes the source, runs the geometry operation and writes the
result. Failures are logged and reported as None; nothing is written unless
the transform and encode succeeded.

The ``prefix`` parameter is prepended to every filesystem access (for
example a document root) and never appears in returned paths.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Tuple

import numpy as np

from imgderive.core.constants import GeometryConstants, NamingConstants, RoundedConstants
from imgderive.core.enums import CutAnchor, ImageType, RenderOperation, TransformCase
from imgderive.core.exceptions import DerivativeError, EncodeError
from imgderive.core.file_store import FileStore, LocalFileStore
from imgderive.core.format_classifier import FormatDecision, classify
from imgderive.core.image.codecs import CODECS, Codec, read_source_info
from imgderive.core.image_handle import ImageHandle
from imgderive.core.naming import (
    crop_path,
    format_path,
    source_copy_path,
    thumbnail_path,
    view_path,
)
from imgderive.schemas.common import AspectRatio, Dimensions

logger = logging.getLogger(__name__)


class DerivativeService:
    """
    Service for derived image artifacts.

    Combines the naming protocol, the format classifier and the geometry
    operations of ImageHandle over a FileStore.
    """

    def __init__(
        self,
        store: Optional[FileStore] = None,
        codecs: Mapping[ImageType, Codec] = None,
        sharp: bool = False,
    ):
        """
        Initialize derivative service.

        Args:
            store: File store (default: local filesystem)
            codecs: Codec registry (default: built-in codecs)
            sharp: Use nearest-neighbour sampling for every transform
        """
        self.store = store if store is not None else LocalFileStore()
        self.codecs = codecs if codecs is not None else CODECS
        self.sharp = sharp

    # Protocol helpers

    def _load(self, path: str) -> ImageHandle:
        return ImageHandle.make(self.store, path, self.codecs)

    def _reuse(
        self, path: str, width: int, ratio: Optional[AspectRatio], check: bool
    ) -> bool:
        """
        Decide whether an existing artifact can be returned as is.

        With check, only the artifact header is read: its width must equal
        width and, when a ratio is given, its height must match the ratio.
        """
        if not self.store.exists(path):
            return False

        if not check:
            logger.debug(f"Cache hit: {path}")
            return True

        try:
            info = read_source_info(self.store, path)
        except DerivativeError as e:
            logger.warning(f"Existing artifact {path} is unreadable, regenerating: {e.message}")
            return False

        if info.width != width:
            logger.info(f"Artifact {path} is {info.width} wide, expected {width}; regenerating")
            return False

        if ratio is not None and ratio.height_for(info.width) != info.height:
            logger.info(f"Artifact {path} does not match ratio {ratio}; regenerating")
            return False

        return True

    def _copy(self, src: str, dst: str) -> None:
        try:
            self.store.copy(src, dst)
        except OSError as e:
            raise EncodeError(f"Failed to copy {src} to {dst}: {e}", dst) from e

    # Entry points

    def thumbnail(
        self,
        source: str,
        width: int,
        prefix: str = "",
        ratio: str = NamingConstants.DEFAULT_RATIO,
        check: bool = False,
    ) -> Optional[str]:
        """
        Letterbox source into a width-wide box of the given ratio.

        Args:
            source: Source path
            width: Thumbnail width
            prefix: Filesystem prefix for source and artifact
            ratio: Width:height ratio, e.g. "3:2"
            check: Validate the size of an existing artifact

        Returns:
            <dir>/<stem>-thumb<w>x<h>w<width>.<ext>, or None on failure
        """
        try:
            parsed = AspectRatio.parse(ratio)
            path = thumbnail_path(source, width, parsed)

            if self._reuse(prefix + path, width, parsed, check):
                return path

            with self._load(prefix + source) as img:
                bitmap = img.thumb(width, parsed.height_for(width), sharp=self.sharp)
                img.save(bitmap, self.store, prefix + path)

            logger.info(f"Generated thumbnail {path}")
            return path

        except DerivativeError as e:
            logger.error(f"Thumbnail of {prefix}{source} not generated: {e.message}")
            return None

    def crop(
        self,
        source: str,
        width: int,
        prefix: str = "",
        ratio: str = NamingConstants.DEFAULT_RATIO,
        check: bool = False,
    ) -> Optional[str]:
        """
        Fill a width-wide box of the given ratio, cropping overflow.

        Returns:
            <dir>/<stem><w>x<h>w<width>.<ext>, or None on failure
        """
        try:
            parsed = AspectRatio.parse(ratio)
            path = crop_path(source, width, parsed)

            if self._reuse(prefix + path, width, parsed, check):
                return path

            with self._load(prefix + source) as img:
                bitmap = img.adapt(width, parsed.height_for(width), sharp=self.sharp)
                img.save(bitmap, self.store, prefix + path)

            logger.info(f"Generated crop {path}")
            return path

        except DerivativeError as e:
            logger.error(f"Crop of {prefix}{source} not generated: {e.message}")
            return None

    def view(
        self,
        source: str,
        width: int,
        prefix: str = "",
        suffix: str = "",
        ratio: str = "",
        check: bool = False,
    ) -> Optional[str]:
        """
        Fit source inside width (and the ratio's height, if given).

        Returns:
            <dir>/<stem><suffix or i<width>>.<ext>, or None on failure
        """
        try:
            parsed = AspectRatio.parse_optional(ratio)
            path = view_path(source, width, suffix)

            if self._reuse(prefix + path, width, parsed, check):
                return path

            with self._load(prefix + source) as img:
                height = parsed.height_for(width) if parsed is not None else 0
                bitmap = img.fit(width, height, sharp=self.sharp)
                img.save(bitmap, self.store, prefix + path)

            logger.info(f"Generated view {path}")
            return path

        except DerivativeError as e:
            logger.error(f"View of {prefix}{source} not generated: {e.message}")
            return None

    def classify(
        self, file: str, width: int = 0, height: int = 0, ratio: str = ""
    ) -> FormatDecision:
        """
        Classify a file against a format.

        Raises:
            InvalidRatioError: If ratio is malformed
        """
        return classify(self.probe(file), width, height, ratio)

    def format(
        self,
        file: str,
        width: int = 0,
        height: int = 0,
        ratio: str = "",
        prefix: str = "",
        keep_source: bool = False,
        suffix_mode: bool = False,
    ) -> Optional[str]:
        """
        Make file conform to a format.

        In place (default) the file itself is rewritten when it exceeds the
        format; keep_source first saves an untouched <stem>.src.<ext> copy,
        once. In suffix mode the result goes to
        <dir>/<stem>-<width>x<height>[-<ratio>].<ext>, reading from the .src
        copy when one exists and copying the input unchanged when it already
        conforms.

        Args:
            file: Image path
            width: Maximum width, 0 for unconstrained
            height: Maximum height, 0 for unconstrained
            ratio: Required width:height ratio, empty for unconstrained
            prefix: Filesystem prefix
            keep_source: Keep an untouched copy before rewriting in place
            suffix_mode: Write to the suffixed path

        Returns:
            Resulting path, or None on failure
        """
        try:
            source_copy = source_copy_path(file)

            if suffix_mode:
                target = format_path(file, width, height, ratio)
                if self.store.exists(prefix + target):
                    logger.debug(f"Cache hit: {prefix}{target}")
                    return target

                origin = source_copy if self.store.exists(prefix + source_copy) else file
            else:
                target = origin = file

            decision = self.classify(prefix + origin, width, height, ratio)

            if decision.case == TransformCase.INVALID:
                logger.warning(f"{prefix}{origin} is not a valid image")
                return None

            if decision.case == TransformCase.UNCHANGED:
                if suffix_mode:
                    self._copy(prefix + origin, prefix + target)
                return target

            with self._load(prefix + origin) as img:
                if keep_source and not suffix_mode and not self.store.exists(prefix + source_copy):
                    self._copy(prefix + file, prefix + source_copy)

                bitmap = img.apply(decision, sharp=self.sharp)
                img.save(bitmap, self.store, prefix + target)

            logger.info(f"Formatted {prefix}{origin} ({decision.case.name}) to {target}")
            return target

        except DerivativeError as e:
            logger.error(f"Format of {prefix}{file} failed: {e.message}")
            return None

    def probe(self, file: str) -> Optional[Dimensions]:
        """
        Return the natural size of an image file.

        Returns:
            Dimensions, or None if the file is missing, unreadable, not an
            image, or has a zero side
        """
        if not self.store.exists(file) or not self.store.is_readable(file):
            return None

        try:
            info = read_source_info(self.store, file)
        except DerivativeError as e:
            logger.debug(f"Probe of {file} failed: {e.message}")
            return None

        if not info.mime.startswith("image/") or info.is_empty:
            return None

        return info.size

    def render(
        self,
        source: str,
        operation: RenderOperation,
        width: int = 0,
        height: int = 0,
        anchor: CutAnchor = CutAnchor.CENTER,
        sharp: Optional[bool] = None,
        degrees: float = 0.0,
        radius: int = RoundedConstants.DEFAULT_RADIUS,
        threshold: float = GeometryConstants.DEFAULT_ROTATE_THRESHOLD,
        prefix: str = "",
    ) -> Optional[Tuple[bytes, str]]:
        """
        Transform source in memory and encode it, without writing a file.

        Returns:
            Tuple of (encoded bytes, MIME type), or None on failure
        """
        sharp = self.sharp if sharp is None else sharp

        operations: Dict[RenderOperation, Callable[[ImageHandle], np.ndarray]] = {
            RenderOperation.REDUCE: lambda img: img.reduce(width, sharp=sharp),
            RenderOperation.RESIZE: lambda img: img.resize(width, sharp=sharp),
            RenderOperation.FIT: lambda img: img.fit(width, height, sharp=sharp),
            RenderOperation.THUMB: lambda img: img.thumb(width, height, sharp=sharp),
            RenderOperation.ADAPT: lambda img: img.adapt(width, height, anchor, sharp=sharp),
            RenderOperation.ROTATE: lambda img: img.rotate(degrees),
            RenderOperation.RESIZE_ROTATE: lambda img: img.resize_rotate(width, threshold),
            RenderOperation.ROUNDED: lambda img: img.rounded(radius),
        }

        try:
            with self._load(prefix + source) as img:
                bitmap = operations[operation](img)
                return img.render(bitmap)

        except DerivativeError as e:
            logger.error(f"Render {operation.value} of {prefix}{source} failed: {e.message}")
            return None
