"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from PIL import Image

from shrinkray import operations
from shrinkray.aio import AsyncImageOps
from shrinkray.api.routes import router
from shrinkray.config import get_settings
from shrinkray.errors import ImageError
from shrinkray.workers import WorkerPool

logger = logging.getLogger(__name__)

# Error code -> HTTP status. Unlisted codes are treated as processing errors.
ERROR_STATUS: dict[str, int] = {
    "decode_error": status.HTTP_400_BAD_REQUEST,
    "invalid_option": status.HTTP_400_BAD_REQUEST,
    "invalid_hash": status.HTTP_400_BAD_REQUEST,
    "invalid_hash_data": status.HTTP_400_BAD_REQUEST,
    "unsupported_format": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "processing_error": status.HTTP_422_UNPROCESSABLE_CONTENT,
    "task_error": status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    Image.MAX_IMAGE_PIXELS = settings.max_image_pixels

    logger.info(
        "Starting Shrinkray (max_workers=%s, queue_timeout=%s, max_file_size=%s)",
        settings.max_workers,
        settings.queue_timeout,
        settings.max_file_size,
    )

    worker_pool = WorkerPool(settings)
    app.state.worker_pool = worker_pool
    app.state.image_ops = AsyncImageOps(worker_pool)

    logger.info("Shrinkray ready")
    yield

    logger.info("Shutting down Shrinkray")
    worker_pool.shutdown()
    logger.info("Shrinkray shutdown complete")


async def handle_image_error(request: Request, exc: ImageError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_422_UNPROCESSABLE_CONTENT)
    if status_code >= status.HTTP_422_UNPROCESSABLE_CONTENT:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    application = FastAPI(
        title="Shrinkray",
        description="Adaptive image transformation: thumbnails, smart crops, hashes and tensors",
        version=operations.version(),
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ImageError, handle_image_error)
    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
