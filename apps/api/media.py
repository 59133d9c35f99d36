"""
Upload helpers for the API layer.

Bridges FastAPI's UploadFile to the media pipeline. CRUD handlers use
these to turn an optional multipart file into a locator they can store on
the owning record.

Usage:
    from apps.api.media import store_optional_upload

    image = await store_optional_upload(backend, file, "recipes", "picture")
    recipe.image = image or form.image
"""

from fastapi import UploadFile

from packages.media.models import StoredObjectReference, UploadRequest
from packages.media.storage import MediaStorageBackend

__all__ = [
    "store_optional_upload",
    "store_upload",
    "to_upload_request",
]


async def to_upload_request(
    file: UploadFile | None,
    destination_folder: str,
    field_name: str,
) -> UploadRequest | None:
    """
    Read an UploadFile into an UploadRequest.

    Args:
        file: Parsed multipart file, or None
        destination_folder: Logical folder (e.g. "recipes")
        field_name: Form field role (e.g. "picture")

    Returns:
        UploadRequest, or None when no file was sent
    """
    if file is None or not file.filename:
        return None

    content = await file.read()
    return UploadRequest(
        original_name=file.filename,
        field_name=field_name,
        mime_type=file.content_type or "application/octet-stream",
        size_bytes=len(content),
        content=content,
        destination_folder=destination_folder,
    )


async def store_upload(
    backend: MediaStorageBackend,
    file: UploadFile | None,
    destination_folder: str,
    field_name: str,
) -> StoredObjectReference:
    """
    Store an uploaded file.

    The UploadFile is closed once the outcome is known, on both paths.

    Raises:
        UploadError: Validation or transport failure
    """
    try:
        request = await to_upload_request(file, destination_folder, field_name)
        return await backend.store(request)
    finally:
        if file is not None:
            await file.close()


async def store_optional_upload(
    backend: MediaStorageBackend,
    file: UploadFile | None,
    destination_folder: str,
    field_name: str,
) -> str | None:
    """
    Store a file if one was sent and return its locator.

    Returns:
        Locator to persist on the owning record, or None without a file

    Raises:
        UploadError: A file was sent but could not be stored
    """
    if file is None or not file.filename:
        return None
    stored = await store_upload(backend, file, destination_folder, field_name)
    return stored.locator
