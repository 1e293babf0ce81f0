"""Local filesystem storage for course assets with atomic writes."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from coursestore.infrastructure.exceptions import StorageIOError, StoragePermissionError
from coursestore.infrastructure.external.storage.keys import sanitize_key
from coursestore.infrastructure.external.storage.protocol import (
    SignedUrlOptions,
    StorageProviderType,
    UploadOptions,
    UploadResult,
)
from coursestore.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)

DEFAULT_URL_PATH = "/uploads/courses"
HEALTH_CHECK_FILE = ".health-check"
# Prefix deletes must name at least a collection and an item (e.g. courses/<id>/).
MIN_PREFIX_DEPTH = 2


class LocalStorageAdapter:
    """Stores objects as files under root_dir; URLs are served by the app's static route.

    Keys are sanitized before every filesystem call and resolved paths are
    validated against root_dir. Directories are created lazily on write.
    The ETag is the SHA-256 of the stored content.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        root_dir: str,
        base_url: str | None = None,
        url_path: str = DEFAULT_URL_PATH,
    ) -> None:
        """Initialize local storage. Nothing is created on disk here.

        Args:
            root_dir: Base directory for all files.
            base_url: Public origin (e.g. https://courses.example.com); empty gives relative URLs.
            url_path: URL path under which root_dir is served.
        """
        self.root_dir = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.url_path = "/" + url_path.strip("/")

    @property
    def provider_type(self) -> StorageProviderType:
        return StorageProviderType.LOCAL

    @property
    def cdn_enabled(self) -> bool:
        return False

    def _resolve(self, key: str, operation: str) -> Path:
        """Sanitize key and resolve it under root_dir. Raises StoragePermissionError on escape."""
        full_path = (self.root_dir / sanitize_key(key)).resolve()
        try:
            full_path.relative_to(self.root_dir)
        except ValueError as e:
            raise StoragePermissionError(key, operation) from e
        return full_path

    def get_absolute_path(self, key: str) -> str:
        """Return the filesystem path that backs key."""
        return str(self._resolve(key, "resolve"))

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}{self.url_path}/{sanitize_key(key)}"

    async def _write_atomic(self, target: Path, data: bytes) -> None:
        """Write data to a temp file beside target, then rename over it."""
        await aiofiles.os.makedirs(target.parent, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=target.parent, prefix=".tmp_", suffix=target.suffix
        )
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(temp_path, target)
        finally:
            if await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)

    async def _read_source(self, local_path: str) -> bytes:
        try:
            async with aiofiles.open(local_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageIOError(local_path, str(e)) from e

    @traced("storage.local.upload_file")
    async def upload_file(
        self,
        local_path: str,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        data = await self._read_source(local_path)
        return await self.upload_buffer(data, destination_key, options)

    @traced("storage.local.upload_buffer")
    async def upload_buffer(
        self,
        data: bytes,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        key = sanitize_key(destination_key)
        target = self._resolve(key, "upload")
        try:
            await self._write_atomic(target, data)
        except OSError as e:
            raise StorageIOError(str(target), str(e)) from e
        logger.debug("Stored %s (%d bytes)", key, len(data))
        return UploadResult(
            key=key,
            url=self.get_public_url(key),
            size=len(data),
            etag=hashlib.sha256(data).hexdigest(),
        )

    def _prune_empty_parents(self, path: Path) -> None:
        """Remove now-empty directories between path and root_dir."""
        parent = path.parent
        while parent != self.root_dir and self.root_dir in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent

    async def delete_file(self, key: str) -> bool:
        try:
            target = self._resolve(key, "delete")
            await aiofiles.os.remove(target)
        except Exception as e:
            logger.warning("Failed to delete %s: %s", key, e)
            return False
        self._prune_empty_parents(target)
        return True

    async def delete_files(self, keys: list[str]) -> int:
        deleted = 0
        for key in keys:
            if await self.delete_file(key):
                deleted += 1
        return deleted

    @traced("storage.local.delete_prefix")
    async def delete_prefix(self, prefix: str) -> int:
        """Remove every file under prefix and the prefix directory itself.

        Raises StoragePermissionError for the root or a top-level directory.
        """
        target = self._resolve(prefix, "delete")
        if len(target.relative_to(self.root_dir).parts) < MIN_PREFIX_DEPTH:
            raise StoragePermissionError(prefix, "delete_root")
        if not await aiofiles.os.path.exists(target):
            return 0
        if await aiofiles.os.path.isfile(target):
            return 1 if await self.delete_file(prefix) else 0

        def _remove_tree() -> int:
            count = sum(len(files) for _, _, files in os.walk(target))
            shutil.rmtree(target)
            return count

        try:
            count = await asyncio.to_thread(_remove_tree)
        except OSError as e:
            logger.warning("Failed to delete prefix %s: %s", prefix, e)
            return 0
        self._prune_empty_parents(target)
        return count

    async def get_signed_url(
        self, key: str, options: SignedUrlOptions | None = None
    ) -> str:
        logger.warning(
            "Signed URLs are not supported by local storage; returning public URL for %s",
            key,
        )
        return self.get_public_url(key)

    async def health_check(self) -> bool:
        try:
            await aiofiles.os.makedirs(self.root_dir, exist_ok=True)
            probe = self.root_dir / HEALTH_CHECK_FILE
            async with aiofiles.open(probe, "w") as f:
                await f.write("ok")
            await aiofiles.os.remove(probe)
        except Exception as e:
            logger.error("Local storage health check failed: %s", e)
            return False
        return True

    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        return True
