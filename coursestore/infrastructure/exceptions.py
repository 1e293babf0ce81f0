"""Infrastructure exceptions for storage and CDN operations.

Storage errors extend CourseStoreException so presentation can map them
to HTTP responses consistently. Only configuration, local I/O and remote
backend failures raise; delete and purge report failure via return values.
"""

from coursestore.domain.exceptions import CourseStoreException


class StorageException(CourseStoreException):
    """Base exception for storage operations."""


class StorageConfigurationError(StorageException):
    """Required configuration for a storage provider is missing."""

    def __init__(self, provider: str, missing: list[str]) -> None:
        self.provider = provider
        self.missing = list(missing)
        super().__init__(
            f"Missing configuration for {provider} storage: {', '.join(missing)}",
            "STORAGE_CONFIGURATION_ERROR",
            {"provider": provider, "missing": self.missing},
        )


class StorageIOError(StorageException):
    """Local file could not be read or written."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Storage I/O failed for: {file_path}",
            "STORAGE_IO_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageBackendError(StorageException):
    """Remote object store call failed (network or protocol error)."""

    def __init__(self, key: str, operation: str, reason: str) -> None:
        super().__init__(
            f"Storage backend {operation} failed for: {key}",
            "STORAGE_BACKEND_ERROR",
            {"key": key, "operation": operation, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Resolved path escapes the storage root."""

    def __init__(self, file_path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )
