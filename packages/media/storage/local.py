"""Local disk media storage backend."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from packages.media.models import UploadRequest
from packages.media.storage.base import MediaStorageBackend

logger = logging.getLogger(__name__)


class LocalDiskStorage(MediaStorageBackend):
    """
    Local disk storage backend.

    Files land directly in ``root`` as ``<timestamp>-<field>.<ext>``; the
    destination folder is implied by the configured root. The returned
    locator is that name, relative to the root, for static serving.
    """

    def __init__(self, root: str = "./uploads/recipes/images", **kwargs):
        """
        Initialize local disk storage.

        Args:
            root: Directory files are written to
            **kwargs: policy, clock and timeout_seconds for the base class
        """
        super().__init__(**kwargs)
        self.root = Path(root)
        # Create base directory synchronously on init
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def backend_name(self) -> str:
        return "local"

    def describe(self) -> dict:
        info = super().describe()
        info["root"] = str(self.root)
        return info

    def _folder_for(self, request: UploadRequest) -> str:
        return ""

    def path_for(self, key: str) -> Path:
        """Return the absolute path of a stored key."""
        return self.root / key

    async def _write(self, request: UploadRequest, key: str) -> str:
        """
        Write to a temporary file, then rename it into place.

        A failed or oversized write never leaves a file at the final path.
        """
        final_path = self.path_for(key)
        temp_path = final_path.with_name(f".{final_path.name}.part")

        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in self.iter_content(request):
                    await f.write(chunk)
            await aiofiles.os.replace(temp_path, final_path)
        except BaseException:
            await self._discard(temp_path)
            raise

        return key

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial file {path}: {e}")
