"""
Derivation API models.

This module contains models for the derive endpoints:
- thumbnail/crop/view/format requests
- artifact and probe responses
"""

from typing import Optional

from pydantic import BaseModel, Field


class ThumbnailRequest(BaseModel):
    """Request a letterboxed thumbnail"""

    source: str = Field(..., description="Source path relative to the document root")
    width: int = Field(..., gt=0, description="Thumbnail width")
    ratio: Optional[str] = Field(None, description="Width:height ratio (default from settings)")
    check: bool = Field(False, description="Validate an existing artifact's size")


class CropRequest(BaseModel):
    """Request a crop-to-fill derivative"""

    source: str = Field(..., description="Source path relative to the document root")
    width: int = Field(..., gt=0, description="Crop width")
    ratio: Optional[str] = Field(None, description="Width:height ratio (default from settings)")
    check: bool = Field(False, description="Validate an existing artifact's size")


class ViewRequest(BaseModel):
    """Request a sized view"""

    source: str = Field(..., description="Source path relative to the document root")
    width: int = Field(..., gt=0, description="View width")
    suffix: str = Field("", description="Custom name marker (default i<width>)")
    ratio: str = Field("", description="Optional width:height ratio")
    check: bool = Field(False, description="Validate an existing artifact's size")


class FormatRequest(BaseModel):
    """Request that a file conform to a format"""

    file: str = Field(..., description="File path relative to the document root")
    width: int = Field(0, ge=0, description="Maximum width, 0 for unconstrained")
    height: int = Field(0, ge=0, description="Maximum height, 0 for unconstrained")
    ratio: str = Field("", description="Required width:height ratio")
    keep_source: Optional[bool] = Field(
        None, description="Keep an untouched .src copy (default from settings)"
    )
    suffix_mode: bool = Field(False, description="Write to a suffixed path instead of in place")


class DerivedArtifactResponse(BaseModel):
    """Derived artifact and its on-disk size"""

    path: str
    width: int
    height: int
    mime: str


class ProbeResponse(BaseModel):
    """Natural size of an image file"""

    path: str
    width: int
    height: int
