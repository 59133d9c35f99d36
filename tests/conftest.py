"""
Pytest configuration and fixtures.

Provides reusable fixtures for media pipeline testing:
- fixed_clock: Deterministic millisecond timestamp source
- local_storage: LocalDiskStorage rooted in tmp_path
- fake_s3_client / fake_session: In-memory stand-ins for aioboto3
- async_client: httpx AsyncClient bound to the FastAPI app
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from apps.api.config import Settings, get_settings
from apps.api.dependencies import get_media_backend
from packages.media.models import UploadRequest, ValidationPolicy
from packages.media.storage import LocalDiskStorage, RemoteObjectStorage

FIXED_TIMESTAMP = 1700000000000
TEST_BUCKET = "test-bucket"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 992


# =============================================================================
# Object Storage Fakes
# =============================================================================


class FakeS3Client:
    """Async context manager mimicking an aioboto3 S3 client."""

    def __init__(self, error: Exception | None = None, delay: float = 0):
        self.error = error
        self.delay = delay
        self.uploads: list[dict[str, Any]] = []
        self.meta = MagicMock()

    async def __aenter__(self) -> "FakeS3Client":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    async def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.uploads.append(
            {
                "bucket": bucket,
                "key": key,
                "body": fileobj.read(),
                "extra_args": ExtraArgs,
            }
        )


class FakeSession:
    """Records client() calls and hands out a single FakeS3Client."""

    def __init__(self, client: FakeS3Client):
        self._client = client
        self.client_calls: list[tuple[str, dict]] = []

    def client(self, service_name: str, **kwargs) -> FakeS3Client:
        self.client_calls.append((service_name, kwargs))
        return self._client


# =============================================================================
# Pipeline Fixtures
# =============================================================================


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same timestamp."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def policy() -> ValidationPolicy:
    """Default jpg/jpeg/png, 2 MiB policy."""
    return ValidationPolicy(
        allowed_extensions=frozenset({"jpg", "jpeg", "png"}),
        max_size_bytes=2097152,
    )


@pytest.fixture
def make_request():
    """Factory for UploadRequest objects with sensible defaults."""

    def _make(
        original_name: str = "cat.png",
        size_bytes: int | None = None,
        content: Any = PNG_BYTES,
        field_name: str = "picture",
        mime_type: str = "image/png",
        destination_folder: str = "recipes",
    ) -> UploadRequest:
        if size_bytes is None:
            size_bytes = len(content) if isinstance(content, bytes) else 0
        return UploadRequest(
            original_name=original_name,
            field_name=field_name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            content=content,
            destination_folder=destination_folder,
        )

    return _make


@pytest.fixture
def local_storage(tmp_path, policy, fixed_clock) -> LocalDiskStorage:
    """Local disk storage rooted in a temporary directory."""
    return LocalDiskStorage(root=str(tmp_path / "images"), policy=policy, clock=fixed_clock)


@pytest.fixture
def fake_s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def fake_session(fake_s3_client) -> FakeSession:
    return FakeSession(fake_s3_client)


@pytest.fixture
def remote_storage(fake_session, policy, fixed_clock) -> RemoteObjectStorage:
    """Remote storage wired to the in-memory session."""
    return RemoteObjectStorage(
        bucket=TEST_BUCKET,
        session=fake_session,
        policy=policy,
        clock=fixed_clock,
    )


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def app(test_settings):
    """Import and return the FastAPI application."""
    from apps.api.main import app as fastapi_app

    fastapi_app.dependency_overrides.clear()
    fastapi_app.dependency_overrides[get_settings] = lambda: test_settings
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app: FastAPI, local_storage) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app, storing uploads in tmp_path."""
    app.dependency_overrides[get_media_backend] = lambda: local_storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
