"""API tests for the CDN admin endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from coursestore.application.dtos import CourseRecord
from coursestore.application.services.asset_service import AssetService
from coursestore.application.services.cdn_service import CdnService
from coursestore.core.config import get_settings
from coursestore.infrastructure.external.storage.protocol import StorageProviderType
from coursestore.main import app


@pytest.fixture
def cdn_adapter(make_adapter, make_factory):
    """Install a mocked CDN adapter behind the app's services."""
    adapter = make_adapter()
    factory = make_factory(adapter)
    app.state.storage_factory = factory
    app.state.asset_service = AssetService(factory)
    app.state.cdn_service = CdnService(factory)
    return adapter


async def test_status_reports_cdn_and_storage(
    client: AsyncClient, cdn_adapter
) -> None:
    response = await client.get("/api/v1/admin/cdn/status")
    assert response.status_code == 200
    assert response.json() == {
        "cdn": {"enabled": True, "provider": "cdn-s3-style", "healthy": True},
        "storage": {"type": "cdn-s3-style", "cdn_enabled": True, "healthy": True},
    }


async def test_status_with_local_storage(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/cdn/status")
    assert response.status_code == 200
    assert response.json()["cdn"] == {
        "enabled": False,
        "provider": "local",
        "healthy": True,
    }


async def test_purge_requires_a_target(client: AsyncClient, cdn_adapter) -> None:
    response = await client.post("/api/v1/admin/cdn/purge", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    cdn_adapter.purge_cdn_cache.assert_not_awaited()


async def test_purge_pattern(client: AsyncClient, cdn_adapter) -> None:
    response = await client.post(
        "/api/v1/admin/cdn/purge", json={"pattern": "courses/c1/*"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["purged_keys"] == ["courses/c1/*"]
    assert data["cdn_provider"] == "cdn-s3-style"


async def test_purge_urls(client: AsyncClient, cdn_adapter) -> None:
    response = await client.post(
        "/api/v1/admin/cdn/purge",
        json={"urls": ["https://cdn.example.com/courses/c1/index.html"]},
    )
    assert response.status_code == 200
    cdn_adapter.purge_cdn_cache.assert_awaited_once_with(["courses/c1/index.html"])


async def test_purge_failure_returns_502(
    client: AsyncClient, make_adapter, make_factory
) -> None:
    factory = make_factory(make_adapter(purge_ok=False))
    app.state.storage_factory = factory
    app.state.cdn_service = CdnService(factory)

    response = await client.post("/api/v1/admin/cdn/purge", json={"purge_all": True})

    assert response.status_code == 502
    assert response.json()["success"] is False


async def test_purge_on_local_storage_is_no_op(client: AsyncClient) -> None:
    response = await client.post("/api/v1/admin/cdn/purge", json={"purge_all": True})
    assert response.status_code == 200
    assert response.json()["message"] == "CDN not enabled, no cache to purge"


async def test_purge_course_without_lookup_uses_pattern(
    client: AsyncClient, cdn_adapter
) -> None:
    response = await client.post("/api/v1/admin/cdn/purge/c1")
    assert response.status_code == 200
    assert response.json()["purged_keys"] == ["courses/c1/*"]


async def test_purge_course_uses_stored_key(
    client: AsyncClient, make_adapter, make_factory
) -> None:
    factory = make_factory(make_adapter())
    lookup = AsyncMock()
    lookup.get_course.return_value = CourseRecord(
        id="c1", storage_key="courses/c1/pkg.zip", cdn_enabled=True
    )
    app.state.storage_factory = factory
    app.state.cdn_service = CdnService(factory, course_lookup=lookup)

    response = await client.post("/api/v1/admin/cdn/purge/c1")

    assert response.status_code == 200
    assert response.json()["purged_keys"] == ["courses/c1/pkg.zip"]


async def test_purge_unknown_course_returns_404(
    client: AsyncClient, make_adapter, make_factory
) -> None:
    factory = make_factory(make_adapter())
    lookup = AsyncMock()
    lookup.get_course.return_value = None
    app.state.storage_factory = factory
    app.state.cdn_service = CdnService(factory, course_lookup=lookup)

    response = await client.post("/api/v1/admin/cdn/purge/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "COURSE_NOT_FOUND"


async def test_purge_course_with_malformed_id_returns_400(
    client: AsyncClient, cdn_adapter
) -> None:
    response = await client.post("/api/v1/admin/cdn/purge/bad%5Cid")
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    cdn_adapter.purge_cdn_cache.assert_not_awaited()


class TestAdminKey:
    @pytest.fixture(autouse=True)
    def _admin_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ADMIN_API_KEY", "s3cret")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    async def test_missing_key_is_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/admin/cdn/status")
        assert response.status_code == 401
        assert response.json()["error"] == "HTTP_ERROR"

    async def test_wrong_key_is_rejected(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/admin/cdn/status", headers={"X-Admin-Key": "nope"}
        )
        assert response.status_code == 401

    async def test_correct_key_is_accepted(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/admin/cdn/status", headers={"X-Admin-Key": "s3cret"}
        )
        assert response.status_code == 200

    async def test_health_needs_no_key(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == 200


def test_provider_values_are_stable() -> None:
    assert [p.value for p in StorageProviderType] == [
        "local",
        "cdn-s3-style",
        "cdn-distribution-style",
    ]
