"""
Derive API Router - thumbnails, crops, views, formats and in-memory renders
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from imgderive.api.dependencies import get_config, get_prefix, get_service, validate_path
from imgderive.api.exceptions import (
    DerivationFailedException,
    SourceNotFoundException,
    safe_endpoint,
)
from imgderive.core.constants import GeometryConstants, NamingConstants, RoundedConstants
from imgderive.core.enums import CutAnchor, RenderOperation
from imgderive.core.image.codecs import read_source_info
from imgderive.schemas import (
    CropRequest,
    DerivedArtifactResponse,
    FormatRequest,
    ProbeResponse,
    ThumbnailRequest,
    ViewRequest,
)
from imgderive.services.derivative_service import DerivativeService

logger = logging.getLogger(__name__)

router = APIRouter()


def _ratio(ratio: Optional[str], config: Dict[str, Any]) -> str:
    if ratio is not None:
        return ratio
    return config.get("image", {}).get("default_ratio", NamingConstants.DEFAULT_RATIO)


def _failure(service: DerivativeService, prefix: str, source: str, operation: str):
    if not service.store.exists(prefix + source):
        return SourceNotFoundException(source)
    return DerivationFailedException(source, operation)


def _artifact(
    service: DerivativeService, prefix: str, path: Optional[str], source: str, operation: str
) -> DerivedArtifactResponse:
    """Describe a derived artifact, or raise the HTTP error for a failed derivation."""
    if path is None:
        raise _failure(service, prefix, source, operation)

    info = read_source_info(service.store, prefix + path)
    return DerivedArtifactResponse(path=path, width=info.width, height=info.height, mime=info.mime)


@router.post("/thumbnail")
@safe_endpoint
def create_thumbnail(
    request: ThumbnailRequest,
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
    config: Dict[str, Any] = Depends(get_config),
) -> DerivedArtifactResponse:
    """Letterbox an image into a box of the requested width and ratio."""
    source = validate_path(request.source)
    ratio = _ratio(request.ratio, config)
    path = service.thumbnail(source, request.width, prefix=prefix, ratio=ratio, check=request.check)
    return _artifact(service, prefix, path, source, "thumbnail")


@router.post("/crop")
@safe_endpoint
def create_crop(
    request: CropRequest,
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
    config: Dict[str, Any] = Depends(get_config),
) -> DerivedArtifactResponse:
    """Fill a box of the requested width and ratio, cropping overflow."""
    source = validate_path(request.source)
    ratio = _ratio(request.ratio, config)
    path = service.crop(source, request.width, prefix=prefix, ratio=ratio, check=request.check)
    return _artifact(service, prefix, path, source, "crop")


@router.post("/view")
@safe_endpoint
def create_view(
    request: ViewRequest,
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
) -> DerivedArtifactResponse:
    """Fit an image inside the requested width (and ratio height)."""
    source = validate_path(request.source)
    path = service.view(
        source,
        request.width,
        prefix=prefix,
        suffix=request.suffix,
        ratio=request.ratio,
        check=request.check,
    )
    return _artifact(service, prefix, path, source, "view")


@router.post("/format")
@safe_endpoint
def format_file(
    request: FormatRequest,
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
    config: Dict[str, Any] = Depends(get_config),
) -> DerivedArtifactResponse:
    """
    Make a file conform to a format.

    keep_source falls back to the storage.keep_source setting when omitted.
    """
    file = validate_path(request.file)

    keep_source = request.keep_source
    if keep_source is None:
        keep_source = config.get("storage", {}).get("keep_source", False)

    path = service.format(
        file,
        width=request.width,
        height=request.height,
        ratio=request.ratio,
        prefix=prefix,
        keep_source=keep_source,
        suffix_mode=request.suffix_mode,
    )
    return _artifact(service, prefix, path, file, "format")


@router.get("/probe")
@safe_endpoint
def probe(
    path: str = Query(..., description="Image path relative to the document root"),
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
) -> ProbeResponse:
    """Natural size of an image file."""
    path = validate_path(path)
    size = service.probe(prefix + path)
    if size is None:
        raise SourceNotFoundException(path)
    return ProbeResponse(path=path, width=size.width, height=size.height)


@router.get("/render")
@safe_endpoint
def render(
    source: str = Query(..., description="Image path relative to the document root"),
    operation: RenderOperation = Query(RenderOperation.FIT),
    width: int = Query(0, ge=0),
    height: int = Query(0, ge=0),
    anchor: CutAnchor = Query(CutAnchor.CENTER),
    sharp: Optional[bool] = Query(None, description="Nearest-neighbour sampling"),
    degrees: float = Query(0.0, description="Counter-clockwise rotation"),
    radius: int = Query(RoundedConstants.DEFAULT_RADIUS, ge=0),
    service: DerivativeService = Depends(get_service),
    prefix: str = Depends(get_prefix),
    config: Dict[str, Any] = Depends(get_config),
) -> Response:
    """
    Transform an image in memory and return the encoded bytes.

    Nothing is written to disk; the response carries the source's MIME type.
    """
    source = validate_path(source)
    threshold = config.get("image", {}).get(
        "rotate_threshold", GeometryConstants.DEFAULT_ROTATE_THRESHOLD
    )

    result = service.render(
        source,
        operation,
        width=width,
        height=height,
        anchor=anchor,
        sharp=sharp,
        degrees=degrees,
        radius=radius,
        threshold=threshold,
        prefix=prefix,
    )
    if result is None:
        raise _failure(service, prefix, source, operation.value)

    data, mime = result
    logger.debug(f"Rendered {operation.value} of {source}: {len(data)} bytes")
    return Response(content=data, media_type=mime)
