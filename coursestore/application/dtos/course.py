"""DTOs for course records (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CourseRecord:
    """Storage-relevant view of a course row."""

    id: str
    storage_key: str | None = None
    cdn_enabled: bool = False
    storage_path: str | None = None
    file_name: str | None = None
