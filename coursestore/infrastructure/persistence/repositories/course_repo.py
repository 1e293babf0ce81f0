"""Course repository and the course lookup used by CDN invalidation."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coursestore.application.dtos.course import CourseRecord
from coursestore.domain.exceptions import SqlNotConfiguredException
from coursestore.infrastructure.persistence import database
from coursestore.infrastructure.persistence.models.course import Course
from coursestore.infrastructure.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def to_record(course: Course) -> CourseRecord:
    return CourseRecord(
        id=course.id,
        storage_key=course.storage_key,
        cdn_enabled=bool(course.cdn_enabled),
        storage_path=course.storage_path,
        file_name=course.file_name,
    )


class CourseRepository(BaseRepository[Course]):
    """Course reads and storage-location updates."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Course)

    async def list_with_package(self, course_id: str | None = None) -> list[Course]:
        """Courses that have a local package path, optionally filtered to one id."""
        stmt = select(Course).where(Course.storage_path.is_not(None))
        if course_id:
            stmt = stmt.where(Course.id == course_id)
        result = await self.db.execute(stmt.order_by(Course.created_at))
        return list(result.scalars().all())

    async def mark_on_cdn(self, course: Course, storage_key: str) -> Course:
        """Record that the course package now lives at storage_key on the CDN."""
        course.storage_key = storage_key
        course.cdn_enabled = True
        return await self.update(course)


class DatabaseCourseLookup:
    """ICourseLookup backed by the courses table; each lookup uses its own session."""

    async def get_course(self, course_id: str) -> CourseRecord | None:
        database._ensure_engine()
        if database.AsyncSessionLocal is None:
            raise SqlNotConfiguredException()
        async with database.AsyncSessionLocal() as session:
            course = await CourseRepository(session).get_by_id(course_id)
        if course is None:
            logger.debug("Course %s not found", course_id)
            return None
        return to_record(course)
