"""
FastAPI dependencies for the media storage backend.
"""

from fastapi import Request

from packages.media.storage import MediaStorageBackend


def get_media_backend(request: Request) -> MediaStorageBackend:
    """Return the storage backend built at application startup."""
    return request.app.state.media_backend
