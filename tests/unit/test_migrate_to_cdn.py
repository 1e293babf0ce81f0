"""Unit tests for the local-to-CDN migration script."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from coursestore.infrastructure.external.storage.protocol import UploadResult
from scripts.migrate_to_cdn import (
    SKIP_ALREADY_ON_CDN,
    SKIP_NOT_LOCAL,
    MigrationStats,
    migrate_course,
    parse_args,
    print_summary,
)


def _course(path: str | None, cdn_enabled: bool = False) -> SimpleNamespace:
    return SimpleNamespace(
        id="c1",
        title="Fire Safety",
        file_name="fire.zip",
        storage_path=path,
        cdn_enabled=cdn_enabled,
    )


def _asset_service() -> AsyncMock:
    service = AsyncMock()
    service.upload_course_package.return_value = UploadResult(
        key="courses/c1/fire.zip",
        url="https://cdn.example.com/courses/c1/fire.zip",
        size=5,
        etag="e",
    )
    return service


@pytest.fixture
def package(tmp_path: Path) -> Path:
    path = tmp_path / "fire.zip"
    path.write_bytes(b"PK\x05\x06")
    return path


@pytest.mark.asyncio
async def test_uploads_local_package(package: Path) -> None:
    service = _asset_service()
    outcome = await migrate_course(_course(str(package)), service)
    assert outcome.success is True
    assert outcome.storage_key == "courses/c1/fire.zip"
    kwargs = service.upload_course_package.await_args.kwargs
    assert kwargs["file_name"] == "fire.zip"
    assert kwargs["metadata"]["title"] == "Fire Safety"


@pytest.mark.asyncio
async def test_already_on_cdn_is_skipped(package: Path) -> None:
    service = _asset_service()
    outcome = await migrate_course(_course(str(package), cdn_enabled=True), service)
    assert outcome.reason == SKIP_ALREADY_ON_CDN
    assert outcome.skipped is True
    service.upload_course_package.assert_not_awaited()


@pytest.mark.asyncio
async def test_force_remigrates(package: Path) -> None:
    service = _asset_service()
    outcome = await migrate_course(
        _course(str(package), cdn_enabled=True), service, force=True
    )
    assert outcome.success is True


@pytest.mark.asyncio
async def test_remote_path_is_skipped() -> None:
    outcome = await migrate_course(
        _course("https://cdn.example.com/courses/c1/fire.zip"), _asset_service()
    )
    assert outcome.reason == SKIP_NOT_LOCAL
    assert outcome.skipped is True


@pytest.mark.asyncio
async def test_missing_file_fails(tmp_path: Path) -> None:
    outcome = await migrate_course(_course(str(tmp_path / "gone.zip")), _asset_service())
    assert outcome.success is False
    assert outcome.skipped is False
    assert outcome.reason == "File not found"


@pytest.mark.asyncio
async def test_dry_run_does_not_upload(package: Path) -> None:
    service = _asset_service()
    outcome = await migrate_course(_course(str(package)), service, dry_run=True)
    assert outcome.success is True
    assert outcome.storage_key is None
    service.upload_course_package.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_error_is_reported(package: Path) -> None:
    service = _asset_service()
    service.upload_course_package.side_effect = RuntimeError("AccessDenied")
    outcome = await migrate_course(_course(str(package)), service)
    assert outcome.success is False
    assert outcome.reason == "AccessDenied"


def test_parse_args() -> None:
    args = parse_args(["--dry-run", "--course", "c9"])
    assert args.dry_run is True
    assert args.course == "c9"
    assert args.force is False


def test_summary_lists_errors(capsys: pytest.CaptureFixture[str]) -> None:
    stats = MigrationStats(total=3, successful=1, skipped=1, failed=1)
    stats.errors.append(("c2", "File not found"))
    print_summary(stats)
    out = capsys.readouterr().out
    assert "Total courses: 3" in out
    assert "c2: File not found" in out
