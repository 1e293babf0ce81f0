"""Application services: asset storage, CDN invalidation, content policy."""

from coursestore.application.services.asset_service import AssetService
from coursestore.application.services.cdn_service import CdnService
from coursestore.application.services.content_policy import (
    cache_control_for,
    content_type_of,
)

__all__ = ["AssetService", "CdnService", "cache_control_for", "content_type_of"]
