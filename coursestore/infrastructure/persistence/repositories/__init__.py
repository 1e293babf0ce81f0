"""Repositories over SQLAlchemy async sessions."""

from coursestore.infrastructure.persistence.repositories.course_repo import (
    CourseRepository,
    DatabaseCourseLookup,
)

__all__ = ["CourseRepository", "DatabaseCourseLookup"]
