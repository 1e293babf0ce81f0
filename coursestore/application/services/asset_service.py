"""Asset service: course package and asset storage on top of the active adapter."""

from __future__ import annotations

import logging
import os

from coursestore.application.dtos.cdn import AssetUploadResult, StorageInfo
from coursestore.application.services.content_policy import (
    IMMUTABLE_CACHE_CONTROL,
    PACKAGE_CONTENT_TYPE,
    cache_control_for,
    content_type_of,
)
from coursestore.domain.exceptions import ValidationException
from coursestore.infrastructure.external.archive import iter_archive_entries
from coursestore.infrastructure.external.storage.factory import (
    StorageFactory,
    get_storage_factory,
)
from coursestore.infrastructure.external.storage.keys import join_key
from coursestore.infrastructure.external.storage.protocol import (
    SignedUrlOptions,
    StorageAdapter,
    UploadOptions,
    UploadResult,
)
from coursestore.shared.telemetry.tracing import add_span_attributes, traced
from coursestore.shared.utils.datetime import utc_timestamp_iso

logger = logging.getLogger(__name__)


def validate_course_id(course_id: str) -> str:
    """Return course_id if it names exactly one key segment.

    Raises ValidationException for empty or padded ids, ".", ids containing
    "..", and ids containing a path separator.
    """
    if (
        not course_id
        or course_id.strip() != course_id
        or course_id == "."
        or ".." in course_id
        or "/" in course_id
        or "\\" in course_id
    ):
        raise ValidationException(f"Invalid course id: {course_id!r}", field="course_id")
    return course_id


def course_prefix(course_id: str) -> str:
    """Key prefix that holds everything stored for a course."""
    return f"courses/{validate_course_id(course_id)}/"


def package_key(course_id: str, file_name: str) -> str:
    return join_key("courses", validate_course_id(course_id), file_name)


def assets_prefix(course_id: str) -> str:
    return f"courses/{validate_course_id(course_id)}/assets/"


class AssetService:
    """Upload, address and delete course packages and their extracted assets.

    The adapter always comes from the injected StorageFactory; upload and
    delete errors from the adapter propagate to the caller.
    """

    def __init__(self, storage_factory: StorageFactory | None = None) -> None:
        self.storage_factory = storage_factory or get_storage_factory()

    async def _adapter(self) -> StorageAdapter:
        return await self.storage_factory.get_adapter()

    @traced("assets.upload_course_package")
    async def upload_course_package(
        self,
        local_path: str,
        course_id: str,
        file_name: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> UploadResult:
        """Store a whole package under courses/{course_id}/{file_name}.

        Metadata carries course id, file name and upload time; caller
        metadata is merged last and wins on conflicts.
        """
        adapter = await self._adapter()
        name = file_name or os.path.basename(local_path)
        options = UploadOptions(
            content_type=PACKAGE_CONTENT_TYPE,
            cache_control=IMMUTABLE_CACHE_CONTROL,
            metadata={
                "course-id": course_id,
                "file-name": name,
                "uploaded-at": utc_timestamp_iso(),
                **(metadata or {}),
            },
        )
        result = await adapter.upload_file(local_path, package_key(course_id, name), options)
        logger.info(
            "Uploaded package for course %s to %s (%d bytes)",
            course_id,
            result.key,
            result.size,
        )
        return result

    @traced("assets.upload_course_assets")
    async def upload_course_assets(
        self, zip_path: str, course_id: str
    ) -> AssetUploadResult:
        """Upload each file of the package under courses/{course_id}/assets/.

        Stops at the first failed upload; files already stored stay in place.
        """
        adapter = await self._adapter()
        prefix = assets_prefix(course_id)
        count = 0
        total_bytes = 0
        for entry_name, data in iter_archive_entries(zip_path):
            content_type = content_type_of(entry_name)
            options = UploadOptions(
                content_type=content_type,
                cache_control=cache_control_for(content_type),
                metadata={"course-id": course_id, "original-file": entry_name},
            )
            result = await adapter.upload_buffer(data, prefix + entry_name, options)
            count += 1
            total_bytes += result.size
        add_span_attributes(**{"assets.count": count, "assets.bytes": total_bytes})
        logger.info(
            "Uploaded %d asset(s) for course %s (%d bytes)", count, course_id, total_bytes
        )
        return AssetUploadResult(
            storage_key=prefix,
            cdn_url=adapter.get_public_url(prefix),
            asset_count=count,
            total_bytes=total_bytes,
        )

    async def get_course_asset_url(self, key: str) -> str:
        adapter = await self._adapter()
        return adapter.get_public_url(key)

    async def get_signed_asset_url(self, key: str, expires_in: int = 3600) -> str:
        adapter = await self._adapter()
        return await adapter.get_signed_url(key, SignedUrlOptions(expires_in=expires_in))

    @traced("assets.delete_course_assets")
    async def delete_course_assets(
        self, course_id: str, storage_key: str | None = None
    ) -> int:
        """Delete one stored object, or everything under the course prefix.

        Purges the affected keys from the CDN when it is active. Returns the
        number of objects removed.
        """
        validate_course_id(course_id)
        adapter = await self._adapter()
        if storage_key:
            deleted = 1 if await adapter.delete_file(storage_key) else 0
            purge_keys = [storage_key]
        else:
            prefix = course_prefix(course_id)
            deleted = await adapter.delete_prefix(prefix)
            purge_keys = [prefix + "*"]
        if adapter.cdn_enabled and not await adapter.purge_cdn_cache(purge_keys):
            logger.warning("CDN purge after deleting course %s assets failed", course_id)
        logger.info("Deleted %d object(s) for course %s", deleted, course_id)
        return deleted

    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        adapter = await self._adapter()
        return await adapter.purge_cdn_cache(keys)

    async def get_storage_info(self) -> StorageInfo:
        """Type, CDN flag and live health of the active adapter."""
        adapter = await self._adapter()
        return StorageInfo(
            type=adapter.provider_type.value,
            cdn_enabled=adapter.cdn_enabled,
            healthy=await adapter.health_check(),
        )
