"""
imgderive - Main FastAPI Application
"""

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imgderive import __version__
from imgderive.api.exceptions import register_exception_handlers
from imgderive.api.routers import derive, system
from imgderive.config import get_settings
from imgderive.core.file_store import LocalFileStore
from imgderive.core.image.codecs import build_codecs
from imgderive.services.derivative_service import DerivativeService

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Pillow logs every decoded chunk at DEBUG
logging.getLogger("PIL").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting imgderive server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Document root: {os.path.abspath(settings.storage.document_root)}")

    codecs = build_codecs(
        jpeg_quality=settings.image.jpeg_quality,
        png_compress_level=settings.image.png_compress_level,
    )
    service = DerivativeService(
        store=LocalFileStore(), codecs=codecs, sharp=settings.image.sharp
    )

    # Store state for access by routers
    app.state.service = service
    app.state.document_root = settings.storage.document_root
    app.state.config = settings.to_dict()

    logger.info("Derivative service initialized")

    yield

    # Shutdown
    logger.info("imgderive server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="imgderive",
    description="Thumbnails, crops, views and formats memoized on disk",
    version=__version__,
    lifespan=lifespan,
)

if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(derive.router, prefix="/api/derive", tags=["Derive"])
app.include_router(system.router, prefix="/api/system", tags=["System"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "imgderive",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "derive": "/api/derive",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "derivative_service": getattr(app.state, "service", None) is not None,
        },
    }


# Error handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": f"Internal server error: {str(exc)}"})


def run() -> None:
    """Run the server with uvicorn."""
    server_config = uvicorn.Config(
        "imgderive.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level=settings.system.log_level.lower(),
    )
    server = uvicorn.Server(server_config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        logger.info("Server exiting...")


if __name__ == "__main__":
    run()
