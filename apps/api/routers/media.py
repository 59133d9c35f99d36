"""
Media upload endpoints.

Endpoints:
- POST /media/{destination_folder}/{field_name}: Store an image
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from apps.api.config import Settings, get_settings
from apps.api.dependencies import get_media_backend
from apps.api.media import store_upload
from packages.media.models import StoredObjectReference
from packages.media.storage import MediaStorageBackend
from packages.shared.exceptions import NotFoundError

router = APIRouter()


@router.post(
    "/{destination_folder}/{field_name}",
    response_model=StoredObjectReference,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image",
    description=(
        "Validate the file against the type/size policy and store it. "
        "Returns the storage key and a locator to persist on the owning record."
    ),
)
async def upload_media(
    destination_folder: str,
    field_name: str,
    backend: Annotated[MediaStorageBackend, Depends(get_media_backend)],
    settings: Annotated[Settings, Depends(get_settings)],
    file: Annotated[UploadFile | None, File()] = None,
) -> StoredObjectReference:
    if destination_folder not in settings.upload_folders:
        raise NotFoundError("Upload folder", destination_folder)

    return await store_upload(backend, file, destination_folder, field_name)
