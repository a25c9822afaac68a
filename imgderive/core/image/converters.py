"""
Image format conversion utilities.

Handles conversions between the representations used by the package:
- PIL Images (decoder/encoder side)
- NumPy RGBA bitmaps (geometry side)
- Grayscale/RGB arrays promoted to RGBA
"""

import logging

import cv2
import numpy as np
from PIL import Image

from imgderive.core.constants import GeometryConstants
from imgderive.schemas.common import Dimensions

logger = logging.getLogger(__name__)


class ImageConverters:
    """Utilities for converting between image representations."""

    @staticmethod
    def pil_to_bitmap(image: Image.Image) -> np.ndarray:
        """
        Convert PIL Image to an RGBA bitmap.

        Args:
            image: PIL Image in any mode

        Returns:
            NumPy uint8 array of shape (height, width, 4)
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return np.array(image, dtype=np.uint8)

    @staticmethod
    def bitmap_to_pil(bitmap: np.ndarray, keep_alpha: bool = True) -> Image.Image:
        """
        Convert an RGBA bitmap to PIL Image.

        Args:
            bitmap: NumPy array of shape (height, width, 4)
            keep_alpha: If False, drop the alpha channel (RGB result)

        Returns:
            PIL Image in RGBA or RGB mode
        """
        rgba = ImageConverters.ensure_rgba(bitmap)
        if keep_alpha:
            return Image.fromarray(rgba)
        return Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]))

    @staticmethod
    def ensure_rgba(image: np.ndarray) -> np.ndarray:
        """
        Ensure array is RGBA (convert from grayscale or RGB if needed).

        Args:
            image: Grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) array

        Returns:
            Contiguous RGBA array
        """
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
        if image.shape[2] != GeometryConstants.CHANNELS:
            raise ValueError(f"Unsupported channel count: {image.shape[2]}")
        return np.ascontiguousarray(image)

    @staticmethod
    def bitmap_size(bitmap: np.ndarray) -> Dimensions:
        """Dimensions of a bitmap array."""
        height, width = bitmap.shape[:2]
        return Dimensions(width=width, height=height)


pil_to_bitmap = ImageConverters.pil_to_bitmap
bitmap_to_pil = ImageConverters.bitmap_to_pil
ensure_rgba = ImageConverters.ensure_rgba
bitmap_size = ImageConverters.bitmap_size
