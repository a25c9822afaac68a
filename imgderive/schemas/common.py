"""
Common models - core data structures shared by the geometry engine,
services and API.
"""

import re
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from imgderive.core.enums import ImageType
from imgderive.core.exceptions import InvalidRatioError
from imgderive.core.rounding import round_half_away


class Dimensions(BaseModel):
    """Width and height of a bitmap, both strictly positive."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)


class AspectRatio(BaseModel):
    """
    Target width:height proportion.

    Parsed from free-form strings such as ``"3:2"``, ``"3 x 2"`` or
    ``"16/9"``: any run of non-digit characters separates the two numbers.
    """

    model_config = ConfigDict(frozen=True)

    w: int = Field(..., gt=0, description="Width component")
    h: int = Field(..., gt=0, description="Height component")

    @classmethod
    def parse(cls, ratio: str) -> "AspectRatio":
        """
        Parse a ratio string.

        Args:
            ratio: String holding two integers separated by non-digits

        Returns:
            AspectRatio instance

        Raises:
            InvalidRatioError: If fewer than two numbers are present or one is zero
        """
        numbers = re.findall(r"\d+", ratio or "")
        if len(numbers) < 2:
            raise InvalidRatioError(f"Ratio must hold two integers: {ratio!r}")

        w, h = int(numbers[0]), int(numbers[1])
        if w <= 0 or h <= 0:
            raise InvalidRatioError(f"Ratio components must be positive: {ratio!r}")

        return cls(w=w, h=h)

    @classmethod
    def parse_optional(cls, ratio: Optional[str]) -> Optional["AspectRatio"]:
        """Parse a ratio, treating an empty or blank string as unconstrained."""
        if ratio is None or not ratio.strip():
            return None
        return cls.parse(ratio)

    def height_for(self, width: int) -> int:
        """Height matching this ratio for the given width (half away from zero)."""
        return round_half_away(width / self.w * self.h)

    def matches(self, size: Dimensions) -> bool:
        """Check if the size has exactly this ratio (cross-multiplied)."""
        return size.width * self.h == size.height * self.w

    def __str__(self) -> str:
        return f"{self.w}x{self.h}"


class Rect(BaseModel):
    """Rectangle inside a bitmap: offset plus size."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(0, ge=0, description="X offset")
    y: int = Field(0, ge=0, description="Y offset")
    width: int = Field(..., ge=0, description="Width")
    height: int = Field(..., ge=0, description="Height")

    @property
    def x2(self) -> int:
        """Get right edge coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Get bottom edge coordinate."""
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def full(cls, size: Dimensions) -> "Rect":
        """Rectangle covering a whole bitmap of the given size."""
        return cls(x=0, y=0, width=size.width, height=size.height)


class SourceInfo(BaseModel):
    """Metadata captured when an image is loaded."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., ge=0, description="Natural width")
    height: int = Field(..., ge=0, description="Natural height")
    image_type: Optional[ImageType] = Field(None, description="Type tag, None if unsupported")
    format_name: str = Field("", description="Format name reported by the decoder")
    mime: str = Field("", description="MIME type")

    @property
    def size(self) -> Dimensions:
        """Natural size as Dimensions (requires both sides > 0)."""
        return Dimensions(width=self.width, height=self.height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

