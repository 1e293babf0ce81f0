"""CDN service: resolves purge requests to keys and runs them on the active adapter."""

from __future__ import annotations

import logging
from urllib.parse import unquote, urlsplit

from coursestore.application.dtos.cdn import CdnStatus, PurgeRequest, PurgeResult
from coursestore.application.interfaces.repositories import ICourseLookup
from coursestore.application.services.asset_service import validate_course_id
from coursestore.infrastructure.external.storage.factory import (
    StorageFactory,
    get_storage_factory,
)
from coursestore.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

PURGE_EVERYTHING = "*"


def course_pattern(course_id: str) -> str:
    return f"courses/{validate_course_id(course_id)}/*"


def url_to_key(url: str) -> str | None:
    """Return the storage key for an absolute URL, or None if it is not one."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    key = unquote(parts.path).lstrip("/")
    return key or None


class CdnService:
    """Cache invalidation over whichever adapter the factory provides.

    Purge failures are reported in PurgeResult and never raised; a malformed
    course id raises ValidationException before anything is purged.
    """

    def __init__(
        self,
        storage_factory: StorageFactory | None = None,
        course_lookup: ICourseLookup | None = None,
    ) -> None:
        self.storage_factory = storage_factory or get_storage_factory()
        self.course_lookup = course_lookup

    async def _course_keys(self, course_id: str) -> list[str]:
        if self.course_lookup is None:
            return [course_pattern(course_id)]
        try:
            course = await self.course_lookup.get_course(course_id)
        except Exception as e:
            logger.error("Course lookup for %s failed: %s", course_id, e)
            return []
        if course is None:
            logger.warning("Course %s not found; nothing to purge", course_id)
            return []
        if course.storage_key:
            return [course.storage_key]
        return [course_pattern(course_id)]

    async def _resolve_keys(self, request: PurgeRequest) -> list[str]:
        if request.purge_all:
            return [PURGE_EVERYTHING]
        if request.course_id:
            return await self._course_keys(request.course_id)
        if request.pattern:
            return [request.pattern]
        return list(request.keys or [])

    @traced("cdn.purge_cache")
    async def purge_cache(self, request: PurgeRequest) -> PurgeResult:
        if request.course_id:
            validate_course_id(request.course_id)
        adapter = await self.storage_factory.get_adapter()
        provider = adapter.provider_type.value
        if not adapter.cdn_enabled:
            return PurgeResult(
                success=True,
                purged_keys=[],
                message="CDN not enabled, no cache to purge",
                cdn_provider=provider,
            )
        if not request.has_target():
            return PurgeResult(
                success=False,
                message="No purge target specified",
                cdn_provider=provider,
            )

        keys = await self._resolve_keys(request)
        if not keys:
            return PurgeResult(
                success=True,
                purged_keys=[],
                message="No keys found to purge",
                cdn_provider=provider,
            )

        add_span_attributes(**{"cdn.provider": provider, "cdn.key_count": len(keys)})
        try:
            ok = await adapter.purge_cdn_cache(keys)
        except Exception as e:
            logger.exception("CDN cache purge raised: %s", e)
            return PurgeResult(
                success=False,
                message=f"CDN cache purge failed: {e}",
                cdn_provider=provider,
            )
        if not ok:
            return PurgeResult(
                success=False,
                message="CDN cache purge failed",
                cdn_provider=provider,
            )
        logger.info("Purged %d item(s) from %s cache", len(keys), provider)
        return PurgeResult(
            success=True,
            purged_keys=keys,
            message=f"Successfully purged {len(keys)} items from CDN cache",
            cdn_provider=provider,
        )

    async def purge_course_cache(self, course_id: str) -> PurgeResult:
        validate_course_id(course_id)
        return await self.purge_cache(PurgeRequest(course_id=course_id))

    async def purge_urls(self, urls: list[str]) -> PurgeResult:
        """Purge the objects behind absolute public URLs; unparseable URLs are skipped."""
        keys: list[str] = []
        for url in urls:
            key = url_to_key(url)
            if key is None:
                logger.warning("Skipping invalid URL for purge: %s", url)
                continue
            keys.append(key)
        if not keys:
            adapter = await self.storage_factory.get_adapter()
            return PurgeResult(
                success=False,
                message="No valid URLs provided",
                cdn_provider=adapter.provider_type.value,
            )
        return await self.purge_cache(PurgeRequest(keys=keys))

    async def get_cdn_status(self) -> CdnStatus:
        adapter = await self.storage_factory.get_adapter()
        return CdnStatus(
            enabled=adapter.cdn_enabled,
            provider=adapter.provider_type.value,
            healthy=await adapter.health_check(),
        )
