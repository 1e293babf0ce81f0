"""Migrate course packages from local storage to the configured CDN.

Usage:
    python -m scripts.migrate_to_cdn [--dry-run] [--course COURSE_ID] [--force]

Requires DATABASE_URL and a CDN STORAGE_PROVIDER with complete credentials.
Courses already on the CDN are skipped unless --force is given. The local
storage_path is kept on the record as a backup reference.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from dataclasses import dataclass, field
from typing import Any

import coursestore.infrastructure.persistence.database as database
from coursestore.application.services.asset_service import AssetService
from coursestore.infrastructure.external.storage.factory import get_storage_factory
from coursestore.infrastructure.external.storage.protocol import StorageProviderType
from coursestore.infrastructure.persistence.repositories import CourseRepository
from coursestore.shared.telemetry.logging import setup_logging
from coursestore.shared.utils.datetime import utc_timestamp_iso

SKIP_ALREADY_ON_CDN = "Already on CDN"
SKIP_NOT_LOCAL = "Not in local storage"


@dataclass
class MigrationStats:
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class MigrationOutcome:
    success: bool
    reason: str | None = None
    storage_key: str | None = None

    @property
    def skipped(self) -> bool:
        return self.reason in (SKIP_ALREADY_ON_CDN, SKIP_NOT_LOCAL)


async def migrate_course(
    course: Any,
    asset_service: AssetService,
    dry_run: bool = False,
    force: bool = False,
) -> MigrationOutcome:
    """Upload one course's local package to the CDN. Does not touch the database."""
    print(f"Processing course: {course.title} ({course.id})")
    if course.cdn_enabled and not force:
        print("  Already on CDN, skipping")
        return MigrationOutcome(False, SKIP_ALREADY_ON_CDN)
    local_path = course.storage_path
    if not local_path or local_path.startswith(("http://", "https://")):
        print("  No local package, skipping")
        return MigrationOutcome(False, SKIP_NOT_LOCAL)
    if not os.path.isfile(local_path):
        print(f"  Package not found at {local_path}", file=sys.stderr)
        return MigrationOutcome(False, "File not found")

    size_mb = os.path.getsize(local_path) / (1024 * 1024)
    print(f"  File size: {size_mb:.2f} MB")
    if dry_run:
        print("  DRY RUN: would upload to CDN and update database")
        return MigrationOutcome(True)

    try:
        result = await asset_service.upload_course_package(
            local_path,
            course.id,
            file_name=course.file_name or os.path.basename(local_path),
            metadata={"title": course.title, "migrated-at": utc_timestamp_iso()},
        )
    except Exception as e:
        print(f"  Migration failed: {e}", file=sys.stderr)
        return MigrationOutcome(False, str(e))
    print(f"  Uploaded to CDN: {result.url}")
    return MigrationOutcome(True, storage_key=result.key)


def print_summary(stats: MigrationStats) -> None:
    print("=" * 60)
    print("MIGRATION SUMMARY")
    print("=" * 60)
    print(f"Total courses: {stats.total}")
    print(f"Successful:    {stats.successful}")
    print(f"Skipped:       {stats.skipped}")
    print(f"Failed:        {stats.failed}")
    if stats.errors:
        print("Errors:")
        for course_id, error in stats.errors:
            print(f"  - {course_id}: {error}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="Preview without changes")
    parser.add_argument("--course", metavar="COURSE_ID", help="Migrate a single course")
    parser.add_argument(
        "--force", action="store_true", help="Re-migrate courses already on the CDN"
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> MigrationStats:
    """Migrate every course with a local package (or just --course)."""
    args = parse_args(argv)
    setup_logging()
    if args.dry_run:
        print("DRY RUN MODE - no changes will be made")
    if args.force:
        print("FORCE MODE - courses already on the CDN will be re-migrated")

    factory = get_storage_factory()
    provider = factory.configured_provider()
    if provider in (None, StorageProviderType.LOCAL):
        print(
            "CDN not configured: set STORAGE_PROVIDER to cdn-s3-style or cdn-distribution-style",
            file=sys.stderr,
        )
        sys.exit(1)
    adapter = await factory.get_adapter()
    if not adapter.cdn_enabled or not await adapter.health_check():
        print(
            "CDN health check failed; verify CDN credentials and configuration",
            file=sys.stderr,
        )
        sys.exit(1)
    print(f"CDN configured: {provider.value}")

    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)

    asset_service = AssetService(factory)
    stats = MigrationStats()
    async with database.AsyncSessionLocal() as session:
        repo = CourseRepository(session)
        courses = await repo.list_with_package(args.course)
        if args.course and not courses:
            print(
                f"Course not found or has no package: {args.course}", file=sys.stderr
            )
            sys.exit(1)
        stats.total = len(courses)
        print(f"Found {stats.total} course(s) to process")

        for course in courses:
            outcome = await migrate_course(course, asset_service, args.dry_run, args.force)
            if outcome.success:
                if outcome.storage_key:
                    await repo.mark_on_cdn(course, outcome.storage_key)
                    await session.commit()
                    print("  Database updated")
                stats.successful += 1
            elif outcome.skipped:
                stats.skipped += 1
            else:
                stats.failed += 1
                stats.errors.append((course.id, outcome.reason or "Unknown error"))

    await database.dispose_engine()
    print_summary(stats)
    return stats


if __name__ == "__main__":
    asyncio.run(main())
