"""Media upload pipeline: validation, naming and storage of uploaded images."""

from packages.media.errors import (
    DisallowedFileTypeError,
    FileTooLargeError,
    NoFileProvidedError,
    TransportFailureError,
    UploadError,
    UploadErrorKind,
    get_error_message,
)
from packages.media.models import StoredObjectReference, UploadRequest, ValidationPolicy
from packages.media.naming import MonotonicClock, build_object_key, extract_extension

__all__ = [
    # Errors
    "DisallowedFileTypeError",
    "FileTooLargeError",
    "NoFileProvidedError",
    "TransportFailureError",
    "UploadError",
    "UploadErrorKind",
    "get_error_message",
    # Models
    "StoredObjectReference",
    "UploadRequest",
    "ValidationPolicy",
    # Naming
    "MonotonicClock",
    "build_object_key",
    "extract_extension",
]
