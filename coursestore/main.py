"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, routers, and the
static route that serves locally stored course files.

Settings are loaded inside create_app() so tests can set env (and clear
the get_settings cache) before calling create_app().
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from coursestore.api.v1 import api_router
from coursestore.core.config import get_settings
from coursestore.core.exception_handlers import register_exception_handlers
from coursestore.core.lifespan import create_lifespan
from coursestore.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    # Serves local storage, including after a CDN provider falls back to it.
    uploads = Path(settings.uploads_dir)
    uploads.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.uploads_url_path,
        StaticFiles(directory=uploads),
        name="course-uploads",
    )
    return app


app = create_app()
