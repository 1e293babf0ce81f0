"""Application lifespan: startup and shutdown.

Wiring only: storage factory, services, telemetry, database engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from coursestore.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup builds the storage adapter eagerly so provider fallback is
    logged at boot rather than on the first request.
    """
    settings = get_settings()

    # ---- Startup ----
    from coursestore.application.services.asset_service import AssetService
    from coursestore.application.services.cdn_service import CdnService
    from coursestore.infrastructure.external.storage.factory import get_storage_factory
    from coursestore.infrastructure.persistence import database
    from coursestore.infrastructure.persistence.repositories import (
        DatabaseCourseLookup,
    )

    factory = get_storage_factory()
    adapter = await factory.get_adapter()
    logger.info(
        "Storage ready: provider=%s cdn_enabled=%s",
        adapter.provider_type.value,
        adapter.cdn_enabled,
    )
    lookup = DatabaseCourseLookup() if database.is_configured() else None
    app.state.storage_factory = factory
    app.state.asset_service = AssetService(factory)
    app.state.cdn_service = CdnService(factory, course_lookup=lookup)

    if settings.telemetry_enabled:
        from coursestore.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        if database.engine is not None:
            telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    from coursestore.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")

    await database.dispose_engine()
