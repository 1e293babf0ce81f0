"""CDN admin API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PurgeRequestBody(BaseModel):
    """Body for POST /admin/cdn/purge. One target is honored: purge_all, pattern, keys, then urls."""

    purge_all: bool = Field(default=False, description="Purge the whole CDN cache")
    pattern: str | None = Field(default=None, description="Key pattern, e.g. courses/abc/*")
    keys: list[str] | None = Field(default=None, description="Explicit storage keys")
    urls: list[str] | None = Field(default=None, description="Absolute public URLs")


class PurgeResponse(BaseModel):
    """Result of a purge request."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    purged_keys: list[str]
    message: str
    cdn_provider: str | None = None


class CdnStatusItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    provider: str
    healthy: bool


class StorageInfoItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    cdn_enabled: bool
    healthy: bool


class CdnStatusResponse(BaseModel):
    """Response for GET /admin/cdn/status."""

    cdn: CdnStatusItem
    storage: StorageInfoItem
