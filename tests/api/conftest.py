"""
Pytest configuration for API integration tests
"""

import pytest
from fastapi.testclient import TestClient

from imgderive.core.file_store import LocalFileStore
from imgderive.services.derivative_service import DerivativeService


@pytest.fixture
def document_root(tmp_path, make_image):
    """Create a document root on disk with a few sources"""
    img_dir = tmp_path / "img"
    img_dir.mkdir()
    (img_dir / "photo.jpg").write_bytes(make_image(600, 400, "JPEG"))
    (img_dir / "wide.png").write_bytes(make_image(400, 200))
    (img_dir / "notes.txt").write_bytes(b"not an image")
    return tmp_path


@pytest.fixture(scope="function")
def client(document_root):
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh service rooted at its own temporary directory.
    """
    from imgderive.main import app

    app.state.service = DerivativeService(store=LocalFileStore())
    app.state.document_root = str(document_root)
    app.state.config = {
        "environment": "test",
        "storage": {"document_root": str(document_root), "keep_source": False},
        "image": {"rotate_threshold": 1.0},
    }

    # Create test client (no context manager, so the lifespan does not replace state)
    return TestClient(app, raise_server_exceptions=False)
