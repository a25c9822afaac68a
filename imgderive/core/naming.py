"""
Derived artifact naming.

Every derived file lives next to its source; its name is the source stem
plus a marker encoding the requested geometry, and keeps the source
extension. These names are the cache keys, so they must never change.

Templates:
    thumbnail:   <dir>/<stem>-thumb<w>x<h>w<width>.<ext>
    crop:        <dir>/<stem><w>x<h>w<width>.<ext>
    format:      <dir>/<stem>-<width>x<height>[-<ratio>].<ext>
    view:        <dir>/<stem><suffix or i<width>>.<ext>
    source copy: <dir>/<stem>.src.<ext>
"""

import posixpath
import re
from typing import NamedTuple, Optional

from imgderive.core.constants import NamingConstants
from imgderive.schemas.common import AspectRatio


class PathParts(NamedTuple):
    """Directory, stem and extension of a path (extension without the dot)."""

    directory: str
    stem: str
    extension: Optional[str]


def split_path(path: str) -> PathParts:
    """
    Split a path into directory, stem and extension.

    A bare filename has directory ".". The extension is whatever follows the
    last dot of the basename, or None if there is no dot.
    """
    directory = posixpath.dirname(path) or "."
    basename = posixpath.basename(path)

    if "." in basename:
        stem, _, extension = basename.rpartition(".")
        return PathParts(directory, stem, extension)

    return PathParts(directory, basename, None)


def _build(parts: PathParts, stem: str) -> str:
    name = stem if parts.extension is None else f"{stem}.{parts.extension}"
    if parts.directory.endswith("/"):
        return f"{parts.directory}{name}"
    return f"{parts.directory}/{name}"


def thumbnail_path(source: str, width: int, ratio: AspectRatio) -> str:
    """Path of the letterboxed thumbnail of source."""
    parts = split_path(source)
    marker = f"{NamingConstants.THUMB_MARKER}{ratio.w}x{ratio.h}w{width}"
    return _build(parts, parts.stem + marker)


def crop_path(source: str, width: int, ratio: AspectRatio) -> str:
    """Path of the crop-to-fill derivative of source."""
    parts = split_path(source)
    return _build(parts, f"{parts.stem}{ratio.w}x{ratio.h}w{width}")


def format_path(file: str, width: int, height: int, ratio: str = "") -> str:
    """
    Path of a suffixed format derivative.

    The ratio is written as given, with every run of non-digits replaced by
    "x" (so "16 : 9" becomes "16x9").
    """
    parts = split_path(file)
    stem = f"{parts.stem}-{width}x{height}"
    if ratio and ratio.strip():
        stem += "-" + re.sub(r"\D+", "x", ratio.strip())
    return _build(parts, stem)


def source_copy_path(file: str) -> str:
    """Path of the untouched copy kept before an in-place format."""
    parts = split_path(file)
    return _build(parts, parts.stem + NamingConstants.SOURCE_COPY_SUFFIX)


def view_path(source: str, width: int, suffix: str = "") -> str:
    """
    Path of a sized view of source.

    Args:
        source: Source path
        width: Requested width, used when suffix is empty
        suffix: Custom marker; a trailing "." is accepted and ignored
    """
    parts = split_path(source)
    if not suffix:
        suffix = f"{NamingConstants.VIEW_MARKER}{width}"
    elif suffix.endswith("."):
        suffix = suffix[:-1]
    return _build(parts, parts.stem + suffix)
