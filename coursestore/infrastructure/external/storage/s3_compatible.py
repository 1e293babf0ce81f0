"""Shared core for object stores that speak the S3 API and sit behind a CDN.

Uses boto3 (sync) via asyncio.to_thread for the async contract. Subclasses
supply the provider tag and the CDN purge call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiofiles
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from coursestore.infrastructure.exceptions import StorageBackendError, StorageIOError
from coursestore.infrastructure.external.storage.keys import sanitize_key
from coursestore.infrastructure.external.storage.protocol import (
    SignedUrlOptions,
    StorageProviderType,
    UploadOptions,
    UploadResult,
)
from coursestore.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

_BOTO_ERRORS = (ClientError, BotoCoreError)


def normalize_base_url(domain: str) -> str:
    """Return domain as an origin with scheme and without trailing slash."""
    domain = domain.strip().rstrip("/")
    if not domain.startswith(("http://", "https://")):
        domain = f"https://{domain}"
    return domain


def _normalize_metadata(metadata: dict[str, str]) -> dict[str, str]:
    """Object metadata keys are lower-case with dashes; values must be strings."""
    return {k.lower().replace("_", "-"): str(v) for k, v in metadata.items()}


class S3CompatibleStorageAdapter:
    """Upload, delete, sign and probe against an S3-compatible bucket.

    Objects are served from public_base_url (the CDN domain), so public URLs
    never touch the bucket endpoint.
    """

    MAX_DELETE_BATCH = 1000
    provider: StorageProviderType

    def __init__(
        self,
        bucket: str,
        public_base_url: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the S3 client.

        Args:
            bucket: Bucket name.
            public_base_url: CDN domain objects are served from.
            region: Signing region.
            endpoint_url: Custom endpoint for non-AWS stores.
            access_key_id: Optional; falls back to the boto3 credential chain.
            secret_access_key: Optional.
            client: Pre-built S3 client (tests).
        """
        self.bucket = bucket
        self.public_base_url = normalize_base_url(public_base_url)
        self.region = region
        self.endpoint_url = endpoint_url
        if client is None:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                config=Config(
                    retries={"max_attempts": 3, "mode": "adaptive"},
                    connect_timeout=5,
                    read_timeout=60,
                    signature_version="s3v4",
                ),
                **extra,
            )
        self._client = client

    @property
    def provider_type(self) -> StorageProviderType:
        return self.provider

    @property
    def cdn_enabled(self) -> bool:
        return True

    def get_public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{sanitize_key(key)}"

    @traced("storage.s3.upload_file")
    async def upload_file(
        self,
        local_path: str,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        try:
            async with aiofiles.open(local_path, "rb") as f:
                data = await f.read()
        except OSError as e:
            raise StorageIOError(local_path, str(e)) from e
        return await self.upload_buffer(data, destination_key, options)

    @traced("storage.s3.upload_buffer")
    async def upload_buffer(
        self,
        data: bytes,
        destination_key: str,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        key = sanitize_key(destination_key)
        opts = options or UploadOptions()
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": data}
        if opts.content_type:
            params["ContentType"] = opts.content_type
        if opts.cache_control:
            params["CacheControl"] = opts.cache_control
        if opts.metadata:
            params["Metadata"] = _normalize_metadata(opts.metadata)

        def _put() -> dict[str, Any]:
            return self._client.put_object(**params)

        try:
            response = await asyncio.to_thread(_put)
        except _BOTO_ERRORS as e:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, e)
            raise StorageBackendError(key, "upload", str(e)) from e
        add_span_attributes(**{"storage.bucket": self.bucket, "storage.size": len(data)})
        etag = response.get("ETag")
        return UploadResult(
            key=key,
            url=self.get_public_url(key),
            size=len(data),
            etag=etag.strip('"') if etag else None,
        )

    async def delete_file(self, key: str) -> bool:
        key = sanitize_key(key)

        def _delete() -> None:
            self._client.delete_object(Bucket=self.bucket, Key=key)

        try:
            await asyncio.to_thread(_delete)
        except _BOTO_ERRORS as e:
            logger.warning("Failed to delete %s: %s", key, e)
            return False
        return True

    async def _delete_keys(self, keys: list[str]) -> int:
        """Native multi-object delete in batches; returns the confirmed deletion count."""
        deleted = 0
        for i in range(0, len(keys), self.MAX_DELETE_BATCH):
            batch = keys[i : i + self.MAX_DELETE_BATCH]

            def _delete_batch(batch: list[str] = batch) -> dict[str, Any]:
                return self._client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": False},
                )

            try:
                response = await asyncio.to_thread(_delete_batch)
            except _BOTO_ERRORS as e:
                logger.error("Batch delete of %d objects failed: %s", len(batch), e)
                continue
            for error in response.get("Errors", []):
                logger.warning(
                    "Could not delete %s: %s", error.get("Key"), error.get("Message")
                )
            deleted += len(response.get("Deleted", []))
        return deleted

    @traced("storage.s3.delete_files")
    async def delete_files(self, keys: list[str]) -> int:
        if not keys:
            return 0
        return await self._delete_keys([sanitize_key(k) for k in keys])

    @traced("storage.s3.delete_prefix")
    async def delete_prefix(self, prefix: str) -> int:
        prefix = sanitize_key(prefix)
        if not prefix:
            raise StorageBackendError(prefix, "delete_prefix", "empty prefix")

        def _list() -> list[str]:
            paginator = self._client.get_paginator("list_objects_v2")
            found: list[str] = []
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                found.extend(obj["Key"] for obj in page.get("Contents", []))
            return found

        try:
            keys = await asyncio.to_thread(_list)
        except _BOTO_ERRORS as e:
            raise StorageBackendError(prefix, "list", str(e)) from e
        if not keys:
            return 0
        return await self._delete_keys(keys)

    async def get_signed_url(
        self, key: str, options: SignedUrlOptions | None = None
    ) -> str:
        opts = options or SignedUrlOptions()
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": sanitize_key(key)}
        if opts.content_disposition:
            params["ResponseContentDisposition"] = opts.content_disposition

        def _presign() -> str:
            return self._client.generate_presigned_url(
                "get_object", Params=params, ExpiresIn=opts.expires_in
            )

        try:
            return await asyncio.to_thread(_presign)
        except _BOTO_ERRORS as e:
            raise StorageBackendError(key, "sign", str(e)) from e

    async def health_check(self) -> bool:
        def _head() -> None:
            self._client.head_bucket(Bucket=self.bucket)

        try:
            await asyncio.to_thread(_head)
        except Exception as e:
            logger.error("Health check for bucket %s failed: %s", self.bucket, e)
            return False
        return True

    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        raise NotImplementedError
