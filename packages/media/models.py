"""Data model for the media upload pipeline."""

from dataclasses import dataclass, field
from typing import BinaryIO

from pydantic import BaseModel, Field

DEFAULT_ALLOWED_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})
DEFAULT_MAX_SIZE_BYTES = 2 * 1024 * 1024


def normalize_extensions(extensions) -> frozenset[str]:
    """Lowercase extensions and strip leading dots and whitespace."""
    normalized = (ext.strip().lstrip(".").lower() for ext in extensions)
    return frozenset(ext for ext in normalized if ext)


@dataclass(frozen=True)
class UploadRequest:
    """
    A single file submitted to the pipeline.

    ``content`` is either the full byte buffer or a readable binary stream.
    The pipeline reads it but never mutates it.
    """

    original_name: str
    field_name: str
    mime_type: str
    size_bytes: int
    content: bytes | BinaryIO | None
    destination_folder: str = ""

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError("size_bytes must be >= 0")

    @property
    def has_content(self) -> bool:
        return self.content is not None and bool(self.original_name)

    @property
    def effective_size(self) -> int:
        """Declared size, or the buffer length when the buffer is larger."""
        if isinstance(self.content, (bytes, bytearray, memoryview)):
            return max(self.size_bytes, len(self.content))
        return self.size_bytes


@dataclass(frozen=True)
class ValidationPolicy:
    """Allow-list and size ceiling enforced before any bytes are written."""

    allowed_extensions: frozenset[str] = field(default=DEFAULT_ALLOWED_EXTENSIONS)
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "allowed_extensions", normalize_extensions(self.allowed_extensions)
        )
        if self.max_size_bytes < 0:
            raise ValueError("max_size_bytes must be >= 0")

    def describe_allowed(self) -> str:
        """Render the allow-list for error messages, e.g. "JPEG, JPG, PNG"."""
        return ", ".join(sorted(ext.upper() for ext in self.allowed_extensions))


class StoredObjectReference(BaseModel):
    """Result of a confirmed successful write."""

    key: str = Field(..., description="Backend storage key")
    locator: str = Field(..., description="Relative path or public URL")
    original_name: str = Field(..., description="Client-supplied file name")
