"""
FastAPI application entrypoint.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apps.api.config import get_settings
from apps.api.routers import health, media
from packages.media.storage import build_storage_backend
from packages.shared.exceptions import AppException, app_exception_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app.state.media_backend = build_storage_backend(settings)
    logger.info(f"Media storage backend: {settings.storage_backend}")
    yield


app = FastAPI(
    title="Recipe Media Service",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppException, app_exception_handler)

# Include routers
app.include_router(health.router)
app.include_router(media.router, prefix="/api/v1/media", tags=["media"])
