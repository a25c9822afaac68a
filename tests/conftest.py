"""
Pytest configuration and fixtures for imgderive tests
"""

import io

import cv2
import numpy as np
import pytest
from PIL import Image

from imgderive.core.file_store import InMemoryFileStore
from imgderive.services.derivative_service import DerivativeService


def _encode(width, height, fmt="PNG", color=(200, 30, 30)):
    """Encode a solid image with a marker rectangle in the top-left quarter."""
    bitmap = np.zeros((height, width, 3), dtype=np.uint8)
    bitmap[:, :] = color
    cv2.rectangle(bitmap, (0, 0), (width // 4, height // 4), (20, 20, 220), -1)

    buffer = io.BytesIO()
    Image.fromarray(bitmap).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """Factory for encoded synthetic images: make_image(width, height, fmt="PNG")"""
    return _encode


@pytest.fixture
def red_bitmap():
    """Create a solid opaque red RGBA bitmap, 100 wide and 50 tall"""
    bitmap = np.zeros((50, 100, 4), dtype=np.uint8)
    bitmap[:, :] = (255, 0, 0, 255)
    return bitmap


@pytest.fixture
def gradient_bitmap():
    """Create an RGBA bitmap whose red channel encodes x and green channel encodes y"""
    height, width = 60, 120
    bitmap = np.zeros((height, width, 4), dtype=np.uint8)
    bitmap[:, :, 0] = np.arange(width, dtype=np.uint8)[np.newaxis, :]
    bitmap[:, :, 1] = np.arange(height, dtype=np.uint8)[:, np.newaxis]
    bitmap[:, :, 3] = 255
    return bitmap


@pytest.fixture
def memory_store(make_image):
    """Create an in-memory file store holding a few sources"""
    return InMemoryFileStore(
        {
            "img/photo.jpg": make_image(600, 400, "JPEG"),
            "img/wide.png": make_image(400, 200),
            "img/tall.png": make_image(200, 400),
            "img/small.png": make_image(100, 50),
            "img/notes.txt": b"not an image at all",
            "img/empty.png": b"",
        }
    )


@pytest.fixture
def service(memory_store):
    """Create DerivativeService over the in-memory store"""
    return DerivativeService(store=memory_store)
