"""
Tests for LocalDiskStorage.

Covers:
- Successful writes from byte buffers and streams
- Validation before any file is created
- No partial or final file left behind when a write fails
"""

import io
from pathlib import Path

import pytest

from packages.media.errors import (
    DisallowedFileTypeError,
    FileTooLargeError,
    NoFileProvidedError,
    TransportFailureError,
)
from packages.media.storage import LocalDiskStorage

from conftest import FIXED_TIMESTAMP, PNG_BYTES


def _files_in(root: Path) -> list[str]:
    return sorted(p.name for p in root.iterdir())


class TestLocalDiskStorage:
    """Tests for LocalDiskStorage backend."""

    def test_creates_root_directory(self, tmp_path):
        root = tmp_path / "nested" / "images"
        LocalDiskStorage(root=str(root))
        assert root.is_dir()

    @pytest.mark.asyncio
    async def test_store_bytes(self, local_storage, make_request):
        """Should write the buffer and return the generated name."""
        stored = await local_storage.store(make_request())

        expected_name = f"{FIXED_TIMESTAMP}-picture.png"
        assert stored.key == expected_name
        assert stored.locator == expected_name
        assert stored.original_name == "cat.png"
        assert local_storage.path_for(stored.key).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_store_stream(self, local_storage, make_request):
        """Should copy a stream source to disk."""
        payload = b"\xff\xd8\xff" + b"j" * 200_000
        request = make_request(
            original_name="dish.JPEG",
            content=io.BytesIO(payload),
            size_bytes=len(payload),
            mime_type="image/jpeg",
        )

        stored = await local_storage.store(request)

        assert stored.key == f"{FIXED_TIMESTAMP}-picture.jpeg"
        assert local_storage.path_for(stored.key).read_bytes() == payload

    @pytest.mark.asyncio
    async def test_does_not_mutate_caller_buffer(self, local_storage, make_request):
        content = bytearray(PNG_BYTES)
        request = make_request(content=content, size_bytes=len(content))

        await local_storage.store(request)

        assert bytes(content) == PNG_BYTES

    @pytest.mark.asyncio
    async def test_ignores_destination_folder(self, local_storage, make_request):
        """The folder is implied by the root; keys are plain file names."""
        stored = await local_storage.store(make_request(destination_folder="../../etc"))
        assert "/" not in stored.key
        assert local_storage.path_for(stored.key).parent == local_storage.root

    @pytest.mark.asyncio
    async def test_rejects_disallowed_type(self, local_storage, make_request):
        with pytest.raises(DisallowedFileTypeError) as exc_info:
            await local_storage.store(make_request(original_name="virus.exe", size_bytes=500))

        assert exc_info.value.message == "Only JPEG, JPG, PNG files are allowed"
        assert _files_in(local_storage.root) == []

    @pytest.mark.asyncio
    async def test_rejects_too_large(self, local_storage, make_request):
        with pytest.raises(FileTooLargeError) as exc_info:
            await local_storage.store(
                make_request(original_name="big.jpg", size_bytes=3_000_000)
            )

        assert exc_info.value.message == "File size exceeds the limit (2MB)"
        assert _files_in(local_storage.root) == []

    @pytest.mark.asyncio
    async def test_rejects_missing_file(self, local_storage, make_request):
        with pytest.raises(NoFileProvidedError):
            await local_storage.store(make_request(content=None))
        with pytest.raises(NoFileProvidedError):
            await local_storage.store(None)

    @pytest.mark.asyncio
    async def test_failed_rename_leaves_no_files(self, local_storage, make_request, monkeypatch):
        """A failed write must not leave a temp or final file behind."""

        async def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("aiofiles.os.replace", failing_replace)

        with pytest.raises(TransportFailureError) as exc_info:
            await local_storage.store(make_request())

        assert "No space left on device" in exc_info.value.message
        assert exc_info.value.retryable is True
        assert _files_in(local_storage.root) == []

    @pytest.mark.asyncio
    async def test_unwritable_root(self, local_storage, make_request):
        """A root removed after startup surfaces as a transport failure."""
        local_storage.root.rmdir()

        with pytest.raises(TransportFailureError):
            await local_storage.store(make_request())

    @pytest.mark.asyncio
    async def test_broken_stream_removes_partial_file(self, local_storage, make_request):
        """Bytes flushed before a read error never become a stored file."""

        class BrokenStream:
            def __init__(self):
                self.calls = 0

            def read(self, size=-1):
                self.calls += 1
                if self.calls == 1:
                    return b"partial"
                raise OSError("connection reset by peer")

        request = make_request(content=BrokenStream(), size_bytes=10)

        with pytest.raises(TransportFailureError) as exc_info:
            await local_storage.store(request)

        assert "connection reset by peer" in exc_info.value.message
        assert _files_in(local_storage.root) == []

    @pytest.mark.asyncio
    async def test_under_declared_stream_is_rejected(self, local_storage, make_request):
        """A stream larger than its declared size is cut off mid-write."""
        request = make_request(
            original_name="big.jpg",
            content=io.BytesIO(b"x" * 3_000_000),
            size_bytes=10,
        )

        with pytest.raises(FileTooLargeError) as exc_info:
            await local_storage.store(request)

        assert exc_info.value.message == "File size exceeds the limit (2MB)"
        assert _files_in(local_storage.root) == []

    @pytest.mark.asyncio
    async def test_stream_at_exact_limit_is_stored(self, local_storage, make_request):
        content = b"x" * 2097152
        request = make_request(content=io.BytesIO(content), size_bytes=0)

        stored = await local_storage.store(request)

        assert local_storage.path_for(stored.key).read_bytes() == content

    def test_describe(self, local_storage):
        info = local_storage.describe()
        assert info["backend"] == "local"
        assert info["root"] == str(local_storage.root)
        assert info["max_size_bytes"] == 2097152
