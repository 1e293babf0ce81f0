"""DTOs for CDN cache invalidation and storage status."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PurgeRequest:
    """What to purge. Precedence: purge_all, then course_id, then pattern, then keys."""

    purge_all: bool = False
    course_id: str | None = None
    pattern: str | None = None
    keys: list[str] | None = None

    def has_target(self) -> bool:
        return bool(self.purge_all or self.course_id or self.pattern or self.keys)


@dataclass(frozen=True)
class PurgeResult:
    """Outcome of a purge request."""

    success: bool
    purged_keys: list[str] = field(default_factory=list)
    message: str = ""
    cdn_provider: str | None = None


@dataclass(frozen=True)
class CdnStatus:
    """CDN state of the active adapter."""

    enabled: bool
    provider: str
    healthy: bool


@dataclass(frozen=True)
class StorageInfo:
    """Active adapter summary."""

    type: str
    cdn_enabled: bool
    healthy: bool


@dataclass(frozen=True)
class AssetUploadResult:
    """Outcome of expanding a package into individual assets."""

    storage_key: str
    cdn_url: str
    asset_count: int
    total_bytes: int = 0
