"""Unit tests for exception codes and serialized bodies."""

from coursestore.domain.exceptions import (
    CourseNotFoundException,
    CourseStoreException,
    SqlNotConfiguredException,
    ValidationException,
)
from coursestore.infrastructure.exceptions import (
    StorageBackendError,
    StorageConfigurationError,
    StorageException,
    StorageIOError,
    StoragePermissionError,
)


def test_default_error_code_is_class_name() -> None:
    exc = CourseStoreException("boom")
    assert exc.error_code == "CourseStoreException"
    assert exc.to_dict() == {
        "error": "CourseStoreException",
        "message": "boom",
        "details": {},
    }


def test_validation_exception_carries_field() -> None:
    exc = ValidationException("No purge target specified", field="keys")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "keys"}


def test_course_not_found() -> None:
    exc = CourseNotFoundException("c-1")
    assert exc.error_code == "COURSE_NOT_FOUND"
    assert "c-1" in exc.message


def test_sql_not_configured_is_service_unavailable() -> None:
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


def test_storage_errors_share_base() -> None:
    errors = [
        StorageConfigurationError("cdn-s3-style", ["CLOUDFLARE_ACCOUNT_ID"]),
        StorageIOError("/tmp/x", "disk full"),
        StorageBackendError("courses/a", "upload", "timeout"),
        StoragePermissionError("../etc", "write"),
    ]
    assert all(isinstance(e, StorageException) for e in errors)
    assert all(isinstance(e, CourseStoreException) for e in errors)
    assert [e.error_code for e in errors] == [
        "STORAGE_CONFIGURATION_ERROR",
        "STORAGE_IO_ERROR",
        "STORAGE_BACKEND_ERROR",
        "STORAGE_PERMISSION_ERROR",
    ]


def test_backend_error_details() -> None:
    exc = StorageBackendError("courses/a/p.zip", "upload", "AccessDenied")
    assert exc.details == {
        "key": "courses/a/p.zip",
        "operation": "upload",
        "reason": "AccessDenied",
    }
