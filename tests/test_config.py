"""
Unit tests for settings
"""

import pytest
from pydantic import ValidationError

from imgderive.config import Settings, get_settings


class TestSettings:
    """Test environment-driven configuration"""

    def test_defaults(self, monkeypatch):
        """Test default values"""
        monkeypatch.delenv("IMGDERIVE_IMAGE__JPEG_QUALITY", raising=False)
        settings = Settings(_env_file=None)

        assert settings.image.default_ratio == "3:2"
        assert settings.image.jpeg_quality == 75
        assert settings.storage.keep_source is False

    def test_nested_environment_override(self, monkeypatch):
        """Test nested sections are set with a double underscore"""
        monkeypatch.setenv("IMGDERIVE_IMAGE__JPEG_QUALITY", "90")
        monkeypatch.setenv("IMGDERIVE_STORAGE__DOCUMENT_ROOT", "/srv/www")

        settings = Settings(_env_file=None)

        assert settings.image.jpeg_quality == 90
        assert settings.storage.document_root == "/srv/www"

    def test_log_level_normalized(self, monkeypatch):
        """Test log levels are case-insensitive and validated"""
        monkeypatch.setenv("IMGDERIVE_SYSTEM__LOG_LEVEL", "debug")
        assert Settings(_env_file=None).system.log_level == "DEBUG"

        monkeypatch.setenv("IMGDERIVE_SYSTEM__LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_to_dict(self):
        """Test settings dump to plain data"""
        data = Settings(_env_file=None).to_dict()
        assert data["image"]["rotate_threshold"] == 1.0
        assert "document_root" in data["storage"]

    def test_get_settings_cached(self):
        """Test get_settings returns one instance"""
        assert get_settings() is get_settings()
