"""Abstract base class for media storage backends."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from packages.media.errors import (
    DisallowedFileTypeError,
    FileTooLargeError,
    NoFileProvidedError,
    TransportFailureError,
    UploadError,
)
from packages.media.models import StoredObjectReference, UploadRequest, ValidationPolicy
from packages.media.naming import Clock, MonotonicClock, build_object_key, extract_extension

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
CHUNK_SIZE = 64 * 1024


class MediaStorageBackend(ABC):
    """
    Abstract base for media storage backends.

    Every backend enforces the same ValidationPolicy and produces exactly one
    terminal outcome per upload: a StoredObjectReference, or an UploadError.
    Subclasses only decide where objects live and how bytes are written.
    """

    def __init__(
        self,
        policy: ValidationPolicy | None = None,
        clock: Clock | None = None,
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Args:
            policy: Validation policy (defaults to jpg/jpeg/png, 2 MiB)
            clock: Millisecond timestamp source used for naming
            timeout_seconds: Deadline for a single write, None to disable
        """
        self.policy = policy or ValidationPolicy()
        self.clock = clock or MonotonicClock()
        self.timeout_seconds = timeout_seconds

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the name of this backend (e.g., 'local', 'remote')."""
        pass

    @abstractmethod
    def _folder_for(self, request: UploadRequest) -> str:
        """Return the folder part of the key for a request ("" for none)."""
        pass

    @abstractmethod
    async def _write(self, request: UploadRequest, key: str) -> str:
        """
        Write the request content under ``key``.

        Returns:
            Locator for the stored object

        Raises:
            Any exception on failure; store() classifies it
        """
        pass

    def describe(self) -> dict[str, Any]:
        """Describe the backend for health and diagnostics output."""
        return {
            "backend": self.backend_name,
            "allowed_extensions": sorted(self.policy.allowed_extensions),
            "max_size_bytes": self.policy.max_size_bytes,
        }

    def validate(self, request: UploadRequest | None) -> str:
        """
        Check presence, extension, then size.

        Args:
            request: The upload to check

        Returns:
            The normalized extension

        Raises:
            NoFileProvidedError: No file content
            DisallowedFileTypeError: Extension not in the allow-list
            FileTooLargeError: Size exceeds the maximum
        """
        if request is None or not request.has_content:
            raise NoFileProvidedError()

        extension = extract_extension(request.original_name)
        if extension not in self.policy.allowed_extensions:
            raise DisallowedFileTypeError(
                message=f"Only {self.policy.describe_allowed()} files are allowed"
            )

        if request.effective_size > self.policy.max_size_bytes:
            raise self._too_large()

        return extension

    def _too_large(self) -> FileTooLargeError:
        return FileTooLargeError(
            message=f"File size exceeds the limit ({_format_size(self.policy.max_size_bytes)})"
        )

    async def iter_content(self, request: UploadRequest) -> AsyncIterator[bytes]:
        """
        Yield the request content in chunks, enforcing the size ceiling.

        Stream reads run in a worker thread. The declared size of a stream is
        not trusted: once more than max_size_bytes have been read,
        FileTooLargeError is raised before the last chunk is yielded.

        Raises:
            FileTooLargeError: The content is larger than the policy allows
        """
        content = request.content
        if isinstance(content, (bytes, bytearray, memoryview)):
            if len(content) > self.policy.max_size_bytes:
                raise self._too_large()
            yield bytes(content)
            return

        total = 0
        while True:
            chunk = await asyncio.to_thread(content.read, CHUNK_SIZE)
            if not chunk:
                return
            total += len(chunk)
            if total > self.policy.max_size_bytes:
                raise self._too_large()
            yield chunk

    def derive_key(self, request: UploadRequest) -> str:
        """Derive the storage key for a validated request."""
        return build_object_key(
            self._folder_for(request),
            request.field_name,
            request.original_name,
            self.clock(),
        )

    async def store(self, request: UploadRequest | None) -> StoredObjectReference:
        """
        Validate and store an upload.

        Args:
            request: The upload to store

        Returns:
            StoredObjectReference once the write is confirmed

        Raises:
            NoFileProvidedError, DisallowedFileTypeError, FileTooLargeError:
                Validation failed, nothing was written
            TransportFailureError: The write failed or timed out
        """
        try:
            self.validate(request)
        except UploadError as e:
            name = request.original_name if request is not None else None
            logger.warning(f"Rejected upload {name!r}: {e.kind.value}: {e.message}")
            raise

        key = self.derive_key(request)
        logger.info(
            f"Storing {request.original_name!r} ({request.effective_size} bytes) "
            f"as {key} on {self.backend_name}"
        )

        try:
            if self.timeout_seconds is None:
                locator = await self._write(request, key)
            else:
                locator = await asyncio.wait_for(
                    self._write(request, key), timeout=self.timeout_seconds
                )
        except UploadError as e:
            logger.warning(f"Upload of {key} aborted: {e.kind.value}: {e.message}")
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"Upload of {key} timed out after {self.timeout_seconds}s")
            raise TransportFailureError(
                detail=f"timed out after {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            logger.exception(f"Upload of {key} failed on {self.backend_name}")
            raise TransportFailureError(detail=str(e) or type(e).__name__) from e

        if not locator:
            raise TransportFailureError(detail="backend returned an empty locator")

        logger.info(f"Stored {key} at {locator}")
        return StoredObjectReference(
            key=key,
            locator=locator,
            original_name=request.original_name,
        )


def _format_size(size_bytes: int) -> str:
    """Format a byte count the way limits are usually quoted (2MB, 512KB)."""
    mb = 1024 * 1024
    if size_bytes >= mb and size_bytes % mb == 0:
        return f"{size_bytes // mb}MB"
    if size_bytes >= 1024 and size_bytes % 1024 == 0:
        return f"{size_bytes // 1024}KB"
    return f"{size_bytes} bytes"
