"""Storage adapter factory: one shared adapter per process, chosen from settings.

A CDN adapter is used only when its configuration is complete and its health
check passes; otherwise the factory logs why and serves the local adapter.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from coursestore.infrastructure.exceptions import StorageConfigurationError
from coursestore.infrastructure.external.storage.distribution_cdn_storage import (
    DistributionCdnStorageAdapter,
)
from coursestore.infrastructure.external.storage.edge_cdn_storage import (
    EdgeCdnStorageAdapter,
)
from coursestore.infrastructure.external.storage.local_storage import (
    LocalStorageAdapter,
)
from coursestore.infrastructure.external.storage.protocol import (
    StorageAdapter,
    StorageProviderType,
)

if TYPE_CHECKING:
    from coursestore.core.config import Settings

logger = logging.getLogger(__name__)

_EDGE_REQUIRED = {
    "cloudflare_account_id": "CLOUDFLARE_ACCOUNT_ID",
    "cloudflare_r2_access_key_id": "CLOUDFLARE_R2_ACCESS_KEY_ID",
    "cloudflare_r2_secret_access_key": "CLOUDFLARE_R2_SECRET_ACCESS_KEY",
    "cloudflare_r2_bucket_name": "CLOUDFLARE_R2_BUCKET_NAME",
    "cloudflare_r2_cdn_domain": "CLOUDFLARE_R2_CDN_DOMAIN",
}

_DISTRIBUTION_REQUIRED = {
    "aws_region": "AWS_REGION",
    "aws_access_key_id": "AWS_ACCESS_KEY_ID",
    "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "aws_s3_bucket_name": "AWS_S3_BUCKET_NAME",
    "aws_cloudfront_domain": "AWS_CLOUDFRONT_DOMAIN",
}


def _secret(value: object) -> str | None:
    """Unwrap SecretStr (or pass through plain strings)."""
    if value is None:
        return None
    getter = getattr(value, "get_secret_value", None)
    return getter() if getter else str(value)


def _require(settings: Settings, provider: StorageProviderType, fields: dict[str, str]) -> dict[str, str]:
    """Return the named settings, or raise listing every missing env var."""
    values = {name: _secret(getattr(settings, name, None)) for name in fields}
    missing = [env for name, env in fields.items() if not values[name]]
    if missing:
        raise StorageConfigurationError(provider.value, missing)
    return {k: v for k, v in values.items() if v}


class StorageFactory:
    """Builds and caches the process-wide storage adapter.

    At most one construction runs at a time; concurrent callers wait on the
    lock and receive the same instance. reset() drops the cached adapter
    and invalidates any construction still running, whose result is
    discarded and rebuilt.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._adapter: StorageAdapter | None = None
        self._lock = asyncio.Lock()
        self._generation = 0

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            from coursestore.core.config import get_settings

            self._settings = get_settings()
        return self._settings

    def configured_provider(self) -> StorageProviderType | None:
        """Provider named by STORAGE_PROVIDER; None when unrecognised. Builds nothing."""
        return StorageProviderType.parse(self.settings.storage_provider)

    async def get_adapter(self) -> StorageAdapter:
        """Return the shared adapter, building it on first use."""
        if self._adapter is not None:
            return self._adapter
        async with self._lock:
            while self._adapter is None:
                generation = self._generation
                adapter = await self._build_adapter()
                if generation == self._generation:
                    self._adapter = adapter
                else:
                    logger.info("Storage factory was reset during construction; rebuilding")
            return self._adapter

    def reset(self) -> None:
        """Forget the cached adapter so the next get_adapter() rebuilds it."""
        self._generation += 1
        self._adapter = None

    def create_local_adapter(self) -> LocalStorageAdapter:
        s = self.settings
        return LocalStorageAdapter(
            root_dir=s.uploads_dir,
            base_url=s.public_domain,
            url_path=s.uploads_url_path,
        )

    def create_cdn_adapter(self, provider: StorageProviderType) -> StorageAdapter:
        """Construct a CDN adapter. Raises StorageConfigurationError when settings are incomplete."""
        s = self.settings
        if provider is StorageProviderType.CDN_S3_STYLE:
            cfg = _require(s, provider, _EDGE_REQUIRED)
            return EdgeCdnStorageAdapter(
                account_id=cfg["cloudflare_account_id"],
                access_key_id=cfg["cloudflare_r2_access_key_id"],
                secret_access_key=cfg["cloudflare_r2_secret_access_key"],
                bucket=cfg["cloudflare_r2_bucket_name"],
                cdn_domain=cfg["cloudflare_r2_cdn_domain"],
                zone_id=s.cloudflare_zone_id,
                api_token=_secret(s.cloudflare_api_token),
                api_base_url=s.cloudflare_api_base_url,
                purge_timeout=s.cdn_purge_timeout_seconds,
            )
        if provider is StorageProviderType.CDN_DISTRIBUTION_STYLE:
            cfg = _require(s, provider, _DISTRIBUTION_REQUIRED)
            return DistributionCdnStorageAdapter(
                region=cfg["aws_region"],
                access_key_id=cfg["aws_access_key_id"],
                secret_access_key=cfg["aws_secret_access_key"],
                bucket=cfg["aws_s3_bucket_name"],
                cdn_domain=cfg["aws_cloudfront_domain"],
                distribution_id=s.aws_cloudfront_distribution_id,
            )
        raise ValueError(f"Not a CDN provider: {provider.value}")

    async def _build_adapter(self) -> StorageAdapter:
        provider = self.configured_provider()
        if provider is None:
            logger.warning(
                "Unknown STORAGE_PROVIDER %r, using local storage",
                self.settings.storage_provider,
            )
            return self.create_local_adapter()
        if provider is StorageProviderType.LOCAL:
            logger.info("Using local storage at %s", self.settings.uploads_dir)
            return self.create_local_adapter()

        try:
            adapter = self.create_cdn_adapter(provider)
        except StorageConfigurationError as e:
            logger.warning("%s; falling back to local storage", e.message)
            return self.create_local_adapter()
        except Exception as e:
            logger.error(
                "Failed to initialize %s storage: %s; falling back to local storage",
                provider.value,
                e,
            )
            return self.create_local_adapter()

        if not await adapter.health_check():
            logger.warning(
                "%s storage failed its health check; falling back to local storage",
                provider.value,
            )
            return self.create_local_adapter()
        logger.info("Using %s storage", provider.value)
        return adapter


_default_factory: StorageFactory | None = None


def get_storage_factory() -> StorageFactory:
    """Return the process-wide factory (created on first call)."""
    global _default_factory
    if _default_factory is None:
        _default_factory = StorageFactory()
    return _default_factory


def reset_storage_factory() -> None:
    """Drop the process-wide factory and its adapter (tests)."""
    global _default_factory
    if _default_factory is not None:
        _default_factory.reset()
    _default_factory = None
