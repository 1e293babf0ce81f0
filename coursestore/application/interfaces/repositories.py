"""Repository interfaces (ports) for the application layer.

Infrastructure implementations must fulfill these protocols. No
infrastructure imports here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from coursestore.application.dtos.course import CourseRecord


class ICourseLookup(Protocol):
    """Read access to course records for cache invalidation."""

    async def get_course(self, course_id: str) -> CourseRecord | None:
        """Return the course record, or None if it does not exist."""
