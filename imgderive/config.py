"""
Configuration for imgderive.

Settings are read from the environment (prefix IMGDERIVE_, nested sections
separated by a double underscore, e.g. IMGDERIVE_IMAGE__JPEG_QUALITY=90) and
from an optional .env file in the working directory.
"""

from functools import lru_cache
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imgderive.core.constants import CodecConstants, GeometryConstants, NamingConstants


class StorageSettings(BaseModel):
    """Where derived artifacts live"""

    document_root: str = Field(".", description="Prefix applied to every HTTP path")
    keep_source: bool = Field(False, description="Default keep_source for format requests")


class ImageSettings(BaseModel):
    """Encoding and sampling defaults"""

    default_ratio: str = NamingConstants.DEFAULT_RATIO
    jpeg_quality: int = Field(CodecConstants.JPEG_QUALITY, ge=1, le=95)
    png_compress_level: int = Field(CodecConstants.PNG_COMPRESS_LEVEL, ge=0, le=9)
    sharp: bool = False
    rotate_threshold: float = Field(GeometryConstants.DEFAULT_ROTATE_THRESHOLD, gt=0)


class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    cors_enabled: bool = True
    cors_origins: List[str] = ["*"]


class SystemSettings(BaseModel):
    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMGDERIVE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    storage: StorageSettings = StorageSettings()
    image: ImageSettings = ImageSettings()
    api: APISettings = APISettings()
    system: SystemSettings = SystemSettings()

    def to_dict(self) -> Dict[str, Any]:
        """Dump settings as plain data."""
        return self.model_dump()


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
