"""
Health check endpoint.
GET /health - Returns API status and the active storage backend.
"""

from typing import Any

from fastapi import APIRouter, Depends

from apps.api.dependencies import get_media_backend
from packages.media.storage import MediaStorageBackend

router = APIRouter()


@router.get("/health")
def health_check(
    backend: MediaStorageBackend = Depends(get_media_backend),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        200 + {"status": "ok", "storage": {...}}
    """
    return {
        "status": "ok",
        "api": "ok",
        "storage": backend.describe(),
    }
