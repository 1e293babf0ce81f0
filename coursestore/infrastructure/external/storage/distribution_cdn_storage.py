"""Object store fronted by a separate CDN distribution (S3 + CloudFront).

Purges create distribution invalidations; wildcard paths are native.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from coursestore.infrastructure.external.storage.keys import sanitize_key
from coursestore.infrastructure.external.storage.protocol import StorageProviderType
from coursestore.infrastructure.external.storage.s3_compatible import (
    S3CompatibleStorageAdapter,
)
from coursestore.shared.telemetry.tracing import traced
from coursestore.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class DistributionCdnStorageAdapter(S3CompatibleStorageAdapter):
    """S3 bucket served from a CloudFront domain.

    Signed URLs are S3 presigned URLs, not distribution-signed URLs.
    """

    provider = StorageProviderType.CDN_DISTRIBUTION_STYLE

    def __init__(
        self,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        cdn_domain: str,
        *,
        distribution_id: str | None = None,
        client: Any = None,
        cdn_client: Any = None,
    ) -> None:
        super().__init__(
            bucket,
            cdn_domain,
            region=region,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            client=client,
        )
        self.distribution_id = distribution_id
        if cdn_client is None and distribution_id:
            cdn_client = boto3.client(
                "cloudfront",
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )
        self._cdn_client = cdn_client

    @staticmethod
    def _invalidation_paths(keys: list[str]) -> list[str]:
        paths = []
        for key in keys:
            if key.strip() == "*":
                paths.append("/*")
            else:
                paths.append("/" + sanitize_key(key))
        return list(dict.fromkeys(paths))

    @traced("storage.distribution.purge_cdn_cache")
    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        if not self.distribution_id or self._cdn_client is None:
            logger.warning("CDN purge skipped: distribution id not configured")
            return False
        paths = self._invalidation_paths(keys)
        if not paths:
            return True
        caller_reference = (
            f"invalidation-{int(utc_now().timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"
        )

        def _invalidate() -> dict[str, Any]:
            return self._cdn_client.create_invalidation(
                DistributionId=self.distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(paths), "Items": paths},
                    "CallerReference": caller_reference,
                },
            )

        try:
            response = await asyncio.to_thread(_invalidate)
        except (ClientError, BotoCoreError) as e:
            logger.error("CDN invalidation failed: %s", e)
            return False
        invalidation_id = response.get("Invalidation", {}).get("Id")
        logger.info(
            "Created invalidation %s for %d path(s)", invalidation_id, len(paths)
        )
        return True
