"""Storage adapter protocol and value types.

Implementations: LocalStorageAdapter, EdgeCdnStorageAdapter,
DistributionCdnStorageAdapter. Services depend on StorageAdapter only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


class StorageProviderType(str, Enum):
    """Provider tag carried by every adapter."""

    LOCAL = "local"
    CDN_S3_STYLE = "cdn-s3-style"
    CDN_DISTRIBUTION_STYLE = "cdn-distribution-style"

    @classmethod
    def parse(cls, value: str | None) -> StorageProviderType | None:
        """Resolve a selector (including legacy aliases) to a provider type.

        Returns None when the selector is not recognised.
        """
        if not value:
            return cls.LOCAL
        normalized = value.strip().lower()
        normalized = _PROVIDER_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


_PROVIDER_ALIASES = {
    "cloudflare-r2": StorageProviderType.CDN_S3_STYLE.value,
    "r2": StorageProviderType.CDN_S3_STYLE.value,
    "s3-cloudfront": StorageProviderType.CDN_DISTRIBUTION_STYLE.value,
    "cloudfront": StorageProviderType.CDN_DISTRIBUTION_STYLE.value,
}


@dataclass
class UploadOptions:
    """Per-upload headers and metadata. All fields optional."""

    content_type: str | None = None
    cache_control: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""

    key: str
    url: str
    size: int
    etag: str | None = None


@dataclass(frozen=True)
class SignedUrlOptions:
    """Options for a time-limited download URL."""

    expires_in: int = 3600
    content_disposition: str | None = None

    def __post_init__(self) -> None:
        if self.expires_in <= 0:
            raise ValueError("expires_in must be a positive number of seconds")


@runtime_checkable
class StorageAdapter(Protocol):
    """Capability contract for course asset storage backends."""

    @property
    def provider_type(self) -> StorageProviderType:
        """Provider tag."""
        ...

    @property
    def cdn_enabled(self) -> bool:
        """True when objects are served through a purgeable CDN."""
        ...

    async def upload_file(
        self,
        local_path: str,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        """Store a local file under destination_key."""
        ...

    async def upload_buffer(
        self,
        data: bytes,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        """Store in-memory bytes under destination_key."""
        ...

    async def delete_file(self, key: str) -> bool:
        """Delete one object. Returns False on any failure, never raises."""
        ...

    async def delete_files(self, keys: list[str]) -> int:
        """Best-effort batch delete. Returns the number of objects deleted."""
        ...

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with prefix."""
        ...

    def get_public_url(self, key: str) -> str:
        """Return the public URL for key (pure, no I/O)."""
        ...

    async def get_signed_url(
        self, key: str, options: SignedUrlOptions | None = None
    ) -> str:
        """Return a time-limited URL, or the public URL where signing is unsupported."""
        ...

    async def health_check(self) -> bool:
        """Return True if the backend is reachable and writable."""
        ...

    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        """Invalidate edge caches for keys. True no-op for non-CDN backends."""
        ...
