"""Domain exceptions for the course store.

Defines errors that represent invalid course content or lookups. These are
independent of storage backends; the presentation layer maps them to HTTP
responses in exception handlers.
"""

from typing import Any


class CourseStoreException(Exception):
    """Base exception for all course store errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, course_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CourseStoreException):
    """Raised when input validation fails (e.g. empty purge request)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class CourseNotFoundException(CourseStoreException):
    """Raised when a course record does not exist."""

    def __init__(self, course_id: str) -> None:
        super().__init__(
            f"Course not found: {course_id}",
            "COURSE_NOT_FOUND",
            {"course_id": course_id},
        )


class InvalidPackageError(CourseStoreException):
    """Raised when a course package archive cannot be read."""

    def __init__(self, package_path: str, reason: str) -> None:
        super().__init__(
            f"Invalid course package: {package_path}",
            "INVALID_PACKAGE",
            {"package_path": package_path, "reason": reason},
        )


class SqlNotConfiguredException(CourseStoreException):
    """Raised when an operation requires the course database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
