"""Remote object storage backend (S3-compatible, GCS interoperability by default)."""

import logging
from io import BytesIO
from typing import Any
from urllib.parse import quote

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from packages.media.errors import TransportFailureError
from packages.media.models import UploadRequest
from packages.media.naming import sanitize_folder
from packages.media.storage.base import MediaStorageBackend

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_URL = "https://storage.googleapis.com"
DEFAULT_PUBLIC_HOST = "storage.googleapis.com"
PROJECT_ID_HEADER = "x-goog-project-id"


class RemoteObjectStorage(MediaStorageBackend):
    """
    Object storage backend for production.

    Objects are written to ``<prefix>/<destination_folder>/images/<name>``
    and exposed as ``https://<public_host>/<bucket>/<key>``.
    """

    def __init__(
        self,
        bucket: str,
        *,
        project_id: str | None = None,
        endpoint_url: str | None = DEFAULT_ENDPOINT_URL,
        public_host: str = DEFAULT_PUBLIC_HOST,
        region: str = "auto",
        prefix: str = "public",
        credential_source: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        session: Any = None,
        **kwargs,
    ):
        """
        Initialize remote object storage.

        Args:
            bucket: Bucket name
            project_id: Project sent as x-goog-project-id when set
            endpoint_url: S3-compatible endpoint (None for AWS S3)
            public_host: Host used to build public URLs
            region: Signing region
            prefix: Key prefix for all uploads
            credential_source: Shared credentials profile name
            access_key_id: HMAC access key (optional, uses profile/env if not set)
            secret_access_key: HMAC secret (optional, uses profile/env if not set)
            session: Preconfigured aioboto3 session
            **kwargs: policy, clock and timeout_seconds for the base class
        """
        if not bucket:
            raise ValueError("bucket is required for remote object storage")

        super().__init__(**kwargs)
        self.bucket = bucket
        self.project_id = project_id
        self.endpoint_url = endpoint_url
        self.public_host = public_host.strip("/")
        self.region = region
        self.prefix = sanitize_folder(prefix)
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._session = session or aioboto3.Session(profile_name=credential_source)

    @property
    def backend_name(self) -> str:
        return "remote"

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info.update(
            bucket=self.bucket,
            project_id=self.project_id,
            public_host=self.public_host,
        )
        return info

    def _get_client_kwargs(self) -> dict:
        """Build kwargs for S3 client."""
        kwargs = {
            "region_name": self.region,
        }
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.access_key_id and self.secret_access_key:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key
        return kwargs

    def _add_project_header(self, request, **kwargs) -> None:
        request.headers[PROJECT_ID_HEADER] = self.project_id

    def _folder_for(self, request: UploadRequest) -> str:
        return "/".join(
            part
            for part in (self.prefix, sanitize_folder(request.destination_folder), "images")
            if part
        )

    def public_url(self, key: str) -> str:
        """Build the public URL of an object."""
        return f"https://{self.public_host}/{self.bucket}/{quote(key, safe='/')}"

    async def _write(self, request: UploadRequest, key: str) -> str:
        """
        Upload the buffer and return its public URL.

        The object only becomes visible once the upload completes. The whole
        payload is read, and checked against the size ceiling, before the
        client is opened.
        """
        payload = b"".join([chunk async for chunk in self.iter_content(request)])

        try:
            async with self._session.client("s3", **self._get_client_kwargs()) as s3:
                if self.project_id:
                    s3.meta.events.register("before-sign.s3", self._add_project_header)
                with BytesIO(payload) as body:
                    await s3.upload_fileobj(
                        body,
                        self.bucket,
                        key,
                        ExtraArgs={
                            "ContentType": request.mime_type or "application/octet-stream",
                            "Metadata": {
                                "original_filename": quote(request.original_name),
                            },
                        },
                    )
        except (ClientError, BotoCoreError, OSError) as e:
            logger.error(f"Object storage write failed for {self.bucket}/{key}: {e}")
            raise TransportFailureError(detail=str(e)) from e

        return self.public_url(key)
