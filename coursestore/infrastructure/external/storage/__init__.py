"""Storage: local filesystem and CDN-backed object store adapters.

StorageFactory picks the adapter from settings (STORAGE_PROVIDER) and
falls back to local storage when a CDN provider is misconfigured or
unhealthy. All adapters implement StorageAdapter.
"""

from coursestore.infrastructure.external.storage.factory import (
    StorageFactory,
    get_storage_factory,
    reset_storage_factory,
)
from coursestore.infrastructure.external.storage.keys import sanitize_key
from coursestore.infrastructure.external.storage.protocol import (
    SignedUrlOptions,
    StorageAdapter,
    StorageProviderType,
    UploadOptions,
    UploadResult,
)

__all__ = [
    "SignedUrlOptions",
    "StorageAdapter",
    "StorageFactory",
    "StorageProviderType",
    "UploadOptions",
    "UploadResult",
    "get_storage_factory",
    "reset_storage_factory",
    "sanitize_key",
]
