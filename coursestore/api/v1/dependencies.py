"""Presentation-layer dependency injection.

Services are built once in the lifespan and stored on app.state. When the
lifespan has not run (e.g. ASGI test transport), they are built from the
process-wide storage factory on first use.
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from coursestore.application.services.asset_service import AssetService
from coursestore.application.services.cdn_service import CdnService
from coursestore.core.config import get_settings
from coursestore.infrastructure.external.storage.factory import (
    StorageFactory,
    get_storage_factory,
)
from coursestore.infrastructure.persistence import database
from coursestore.infrastructure.persistence.repositories import DatabaseCourseLookup


def get_storage_factory_dep(request: Request) -> StorageFactory:
    factory = getattr(request.app.state, "storage_factory", None)
    if factory is None:
        factory = get_storage_factory()
        request.app.state.storage_factory = factory
    return factory


def get_asset_service(
    request: Request,
    factory: Annotated[StorageFactory, Depends(get_storage_factory_dep)],
) -> AssetService:
    service = getattr(request.app.state, "asset_service", None)
    if service is None:
        service = AssetService(factory)
        request.app.state.asset_service = service
    return service


def get_cdn_service(
    request: Request,
    factory: Annotated[StorageFactory, Depends(get_storage_factory_dep)],
) -> CdnService:
    service = getattr(request.app.state, "cdn_service", None)
    if service is None:
        lookup = DatabaseCourseLookup() if database.is_configured() else None
        service = CdnService(factory, course_lookup=lookup)
        request.app.state.cdn_service = service
    return service


def require_admin_key(
    x_admin_key: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless X-Admin-Key matches ADMIN_API_KEY (when configured)."""
    configured = get_settings().admin_api_key
    if configured is None or not configured.get_secret_value():
        return
    if not x_admin_key or not hmac.compare_digest(
        x_admin_key, configured.get_secret_value()
    ):
        raise HTTPException(status_code=401, detail="Invalid or missing admin key")
