"""Pytest configuration and fixtures for coursestore.

Environment is pinned before the app is imported so settings resolve to
local storage under a throwaway directory and no database or telemetry.
"""

import os
import tempfile
from collections.abc import AsyncIterator, Iterator
from unittest.mock import AsyncMock, MagicMock

_TEST_UPLOADS_DIR = tempfile.mkdtemp(prefix="coursestore-test-")
os.environ.setdefault("UPLOADS_DIR", _TEST_UPLOADS_DIR)
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["DATABASE_URL"] = ""
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ.pop("ADMIN_API_KEY", None)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from coursestore.core.config import get_settings  # noqa: E402
from coursestore.infrastructure.external.storage.factory import (  # noqa: E402
    StorageFactory,
    reset_storage_factory,
)
from coursestore.infrastructure.external.storage.protocol import (  # noqa: E402
    StorageProviderType,
    UploadResult,
)
from coursestore.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_storage() -> Iterator[None]:
    """Fresh settings and process-wide factory for every test."""
    get_settings.cache_clear()
    reset_storage_factory()
    for name in ("storage_factory", "asset_service", "cdn_service"):
        if hasattr(app.state, name):
            delattr(app.state, name)
    yield
    reset_storage_factory()
    get_settings.cache_clear()


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _make_adapter(
    provider: StorageProviderType = StorageProviderType.CDN_S3_STYLE,
    cdn_enabled: bool = True,
    healthy: bool = True,
    purge_ok: bool = True,
) -> MagicMock:
    """Mock StorageAdapter with async methods and a deterministic public URL."""
    adapter = MagicMock()
    adapter.provider_type = provider
    adapter.cdn_enabled = cdn_enabled
    adapter.get_public_url.side_effect = lambda key: f"https://cdn.example.com/{key}"
    adapter.health_check = AsyncMock(return_value=healthy)
    adapter.purge_cdn_cache = AsyncMock(return_value=purge_ok)
    adapter.delete_file = AsyncMock(return_value=True)
    adapter.delete_files = AsyncMock(return_value=0)
    adapter.delete_prefix = AsyncMock(return_value=0)
    adapter.get_signed_url = AsyncMock(return_value="https://signed.example.com/x")

    async def _upload(source, key, options=None):
        size = len(source) if isinstance(source, bytes) else 10
        return UploadResult(key=key, url=f"https://cdn.example.com/{key}", size=size, etag="e")

    adapter.upload_file = AsyncMock(side_effect=_upload)
    adapter.upload_buffer = AsyncMock(side_effect=_upload)
    return adapter


def _make_factory(adapter: MagicMock) -> MagicMock:
    """Mock StorageFactory that always returns adapter."""
    factory = MagicMock(spec=StorageFactory)
    factory.get_adapter = AsyncMock(return_value=adapter)
    return factory


@pytest.fixture
def make_adapter():
    """Builder for mock adapters (see _make_adapter)."""
    return _make_adapter


@pytest.fixture
def make_factory():
    """Builder for mock factories (see _make_factory)."""
    return _make_factory
