"""
Storage backends for the media upload pipeline.

Provides the backend capability and its implementations:
- Local disk storage (development, static-served files)
- Remote object storage (production, public URLs)
"""

from packages.media.storage.base import MediaStorageBackend
from packages.media.storage.factory import build_storage_backend
from packages.media.storage.local import LocalDiskStorage
from packages.media.storage.remote import RemoteObjectStorage

__all__ = [
    "LocalDiskStorage",
    "MediaStorageBackend",
    "RemoteObjectStorage",
    "build_storage_backend",
]
