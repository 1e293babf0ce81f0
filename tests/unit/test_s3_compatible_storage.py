"""Unit tests for the S3-compatible adapter core (boto3 client mocked)."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from coursestore.infrastructure.exceptions import StorageBackendError, StorageIOError
from coursestore.infrastructure.external.storage.edge_cdn_storage import (
    EdgeCdnStorageAdapter,
)
from coursestore.infrastructure.external.storage.protocol import (
    SignedUrlOptions,
    StorageProviderType,
    UploadOptions,
)


def _client_error(code: str = "AccessDenied", op: str = "PutObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "denied"}}, op)


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.put_object.return_value = {"ETag": '"abc123"'}
    return client


@pytest.fixture
def adapter(s3_client: MagicMock) -> EdgeCdnStorageAdapter:
    return EdgeCdnStorageAdapter(
        account_id="acct",
        access_key_id="key",
        secret_access_key="secret",
        bucket="courses-bucket",
        cdn_domain="cdn.example.com",
        client=s3_client,
    )


def test_public_url_uses_cdn_domain(adapter: EdgeCdnStorageAdapter) -> None:
    assert adapter.get_public_url("/courses/a/index.html") == (
        "https://cdn.example.com/courses/a/index.html"
    )
    assert adapter.cdn_enabled is True
    assert adapter.provider_type is StorageProviderType.CDN_S3_STYLE


@pytest.mark.asyncio
async def test_upload_buffer_sends_headers_and_metadata(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    result = await adapter.upload_buffer(
        b"hello",
        "courses/a/index.html",
        UploadOptions(
            content_type="text/html",
            cache_control="public, max-age=3600",
            metadata={"course_id": "a", "Original-File": "index.html"},
        ),
    )
    kwargs = s3_client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "courses-bucket"
    assert kwargs["Key"] == "courses/a/index.html"
    assert kwargs["Body"] == b"hello"
    assert kwargs["ContentType"] == "text/html"
    assert kwargs["CacheControl"] == "public, max-age=3600"
    assert kwargs["Metadata"] == {"course-id": "a", "original-file": "index.html"}
    assert result.etag == "abc123"
    assert result.size == 5
    assert result.url == "https://cdn.example.com/courses/a/index.html"


@pytest.mark.asyncio
async def test_upload_backend_failure_raises(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    s3_client.put_object.side_effect = _client_error()
    with pytest.raises(StorageBackendError) as exc_info:
        await adapter.upload_buffer(b"x", "courses/a/x.bin")
    assert exc_info.value.details["operation"] == "upload"


@pytest.mark.asyncio
async def test_upload_file_unreadable_source_raises_io_error(
    adapter: EdgeCdnStorageAdapter, tmp_path: Path
) -> None:
    with pytest.raises(StorageIOError):
        await adapter.upload_file(str(tmp_path / "nope.zip"), "courses/a/p.zip")


@pytest.mark.asyncio
async def test_delete_file_returns_false_on_error(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    s3_client.delete_object.side_effect = _client_error(op="DeleteObject")
    assert await adapter.delete_file("courses/a/x.bin") is False


@pytest.mark.asyncio
async def test_delete_files_partial_failure_counts_deleted(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    s3_client.delete_objects.return_value = {
        "Deleted": [{"Key": "a"}, {"Key": "b"}],
        "Errors": [{"Key": "c", "Code": "AccessDenied", "Message": "denied"}],
    }
    assert await adapter.delete_files(["a", "b", "c"]) == 2


@pytest.mark.asyncio
async def test_delete_files_chunks_at_batch_limit(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    def _echo(Bucket: str, Delete: dict) -> dict:
        return {"Deleted": Delete["Objects"]}

    s3_client.delete_objects.side_effect = _echo
    keys = [f"k{i}" for i in range(2500)]
    assert await adapter.delete_files(keys) == 2500
    sizes = [len(c.kwargs["Delete"]["Objects"]) for c in s3_client.delete_objects.call_args_list]
    assert sizes == [1000, 1000, 500]


@pytest.mark.asyncio
async def test_delete_files_empty_makes_no_call(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    assert await adapter.delete_files([]) == 0
    s3_client.delete_objects.assert_not_called()


@pytest.mark.asyncio
async def test_delete_prefix_lists_then_deletes(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    paginator = MagicMock()
    paginator.paginate.return_value = [
        {"Contents": [{"Key": "courses/a/p.zip"}, {"Key": "courses/a/assets/i.html"}]},
        {},
    ]
    s3_client.get_paginator.return_value = paginator
    s3_client.delete_objects.return_value = {
        "Deleted": [{"Key": "courses/a/p.zip"}, {"Key": "courses/a/assets/i.html"}]
    }
    assert await adapter.delete_prefix("courses/a/") == 2
    paginator.paginate.assert_called_once_with(Bucket="courses-bucket", Prefix="courses/a/")


@pytest.mark.asyncio
async def test_delete_prefix_rejects_empty_prefix(adapter: EdgeCdnStorageAdapter) -> None:
    with pytest.raises(StorageBackendError):
        await adapter.delete_prefix("/")


@pytest.mark.asyncio
async def test_signed_url_passes_expiry_and_disposition(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    s3_client.generate_presigned_url.return_value = "https://signed"
    url = await adapter.get_signed_url(
        "courses/a/p.zip",
        SignedUrlOptions(expires_in=120, content_disposition="attachment"),
    )
    assert url == "https://signed"
    s3_client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={
            "Bucket": "courses-bucket",
            "Key": "courses/a/p.zip",
            "ResponseContentDisposition": "attachment",
        },
        ExpiresIn=120,
    )


@pytest.mark.asyncio
async def test_health_check_uses_head_bucket(
    adapter: EdgeCdnStorageAdapter, s3_client: MagicMock
) -> None:
    assert await adapter.health_check() is True
    s3_client.head_bucket.assert_called_once_with(Bucket="courses-bucket")
    s3_client.head_bucket.side_effect = _client_error("404", "HeadBucket")
    assert await adapter.health_check() is False


def test_signed_url_options_reject_non_positive_expiry() -> None:
    with pytest.raises(ValueError):
        SignedUrlOptions(expires_in=0)
