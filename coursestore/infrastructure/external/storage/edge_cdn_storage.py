"""Object store with a provider-managed edge CDN (Cloudflare R2 behind a zone).

Objects live in an R2 bucket reached through its S3 endpoint; the CDN domain
is attached to the bucket. Purges go to the zone purge API over httpx.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from coursestore.infrastructure.external.storage.keys import sanitize_key
from coursestore.infrastructure.external.storage.protocol import StorageProviderType
from coursestore.infrastructure.external.storage.s3_compatible import (
    S3CompatibleStorageAdapter,
)
from coursestore.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
# Zone purge API accepts at most 30 URLs per request.
MAX_PURGE_URLS = 30


def r2_endpoint(account_id: str) -> str:
    return f"https://{account_id}.r2.cloudflarestorage.com"


class EdgeCdnStorageAdapter(S3CompatibleStorageAdapter):
    """R2 bucket served from a custom CDN domain; purge via the zone API.

    Purge keys map as follows: "*" purges the whole zone, keys ending in "*"
    become URL prefixes, everything else becomes an absolute file URL.
    """

    provider = StorageProviderType.CDN_S3_STYLE

    def __init__(
        self,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        cdn_domain: str,
        *,
        zone_id: str | None = None,
        api_token: str | None = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        purge_timeout: float = 30.0,
        client: Any = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            bucket,
            cdn_domain,
            region="auto",
            endpoint_url=r2_endpoint(account_id),
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            client=client,
        )
        self.account_id = account_id
        self.zone_id = zone_id
        self._api_token = api_token
        self.api_base_url = api_base_url.rstrip("/")
        self.purge_timeout = purge_timeout
        self._http_client = http_client

    def _purge_payloads(self, keys: list[str]) -> list[dict[str, Any]]:
        """Translate keys into zone purge request bodies."""
        if any(k.strip() == "*" for k in keys):
            return [{"purge_everything": True}]
        files: list[str] = []
        prefixes: list[str] = []
        for key in keys:
            if key.endswith("*"):
                host_path = self.get_public_url(key.rstrip("*")).split("://", 1)[1]
                prefixes.append(host_path)
            else:
                files.append(self.get_public_url(key))
        payloads: list[dict[str, Any]] = [
            {"files": files[i : i + MAX_PURGE_URLS]}
            for i in range(0, len(files), MAX_PURGE_URLS)
        ]
        payloads.extend(
            {"prefixes": prefixes[i : i + MAX_PURGE_URLS]}
            for i in range(0, len(prefixes), MAX_PURGE_URLS)
        )
        return payloads

    async def _post_purge(
        self, client: httpx.AsyncClient, payloads: list[dict[str, Any]]
    ) -> bool:
        url = f"{self.api_base_url}/zones/{self.zone_id}/purge_cache"
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }
        for payload in payloads:
            response = await client.post(url, json=payload, headers=headers)
            body = response.json() if response.content else {}
            if response.status_code >= 400 or not body.get("success", False):
                logger.error(
                    "CDN purge rejected (status=%s): %s",
                    response.status_code,
                    body.get("errors"),
                )
                return False
        return True

    @traced("storage.edge.purge_cdn_cache")
    async def purge_cdn_cache(self, keys: list[str]) -> bool:
        if not self.zone_id or not self._api_token:
            logger.warning("CDN purge skipped: zone id or API token not configured")
            return False
        keys = [k if k.strip() == "*" else sanitize_key(k) for k in keys]
        payloads = self._purge_payloads(keys)
        if not payloads:
            return True
        try:
            if self._http_client is not None:
                ok = await self._post_purge(self._http_client, payloads)
            else:
                async with httpx.AsyncClient(timeout=self.purge_timeout) as client:
                    ok = await self._post_purge(client, payloads)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("CDN purge request failed: %s", e)
            return False
        if ok:
            logger.info("Purged %d key(s) from edge cache", len(keys))
        return ok
