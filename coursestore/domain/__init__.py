"""Domain layer: exceptions for course content and lookups.

No dependencies on infrastructure or presentation.
"""

from coursestore.domain.exceptions import (
    CourseNotFoundException,
    CourseStoreException,
    InvalidPackageError,
    SqlNotConfiguredException,
    ValidationException,
)

__all__ = [
    "CourseNotFoundException",
    "CourseStoreException",
    "InvalidPackageError",
    "SqlNotConfiguredException",
    "ValidationException",
]
