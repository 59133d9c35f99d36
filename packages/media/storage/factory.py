"""Factory for creating storage backends based on configuration."""

from typing import TYPE_CHECKING

from packages.media.naming import Clock
from packages.media.storage.base import MediaStorageBackend
from packages.media.storage.local import LocalDiskStorage

if TYPE_CHECKING:
    from apps.api.config import Settings


def build_storage_backend(
    settings: "Settings",
    clock: Clock | None = None,
    session=None,
) -> MediaStorageBackend:
    """
    Create the storage backend selected by ``settings.storage_backend``.

    Called once at application startup; the result is held by the app
    rather than cached at module level.

    Args:
        settings: Application settings
        clock: Optional timestamp source for naming
        session: Optional aioboto3 session for the remote backend

    Returns:
        Configured MediaStorageBackend instance
    """
    common = {
        "policy": settings.validation_policy(),
        "clock": clock,
        "timeout_seconds": settings.upload_timeout_seconds,
    }

    if settings.storage_backend == "remote":
        from packages.media.storage.remote import RemoteObjectStorage

        return RemoteObjectStorage(
            bucket=settings.bucket_name,
            project_id=settings.project_id,
            endpoint_url=settings.storage_endpoint_url,
            public_host=settings.storage_public_host,
            region=settings.storage_region,
            prefix=settings.public_prefix,
            credential_source=settings.credential_source,
            access_key_id=settings.storage_access_key_id,
            secret_access_key=settings.storage_secret_access_key,
            session=session,
            **common,
        )

    return LocalDiskStorage(root=settings.local_upload_path, **common)
