"""Unit tests for the S3-compatible blob store.

Tests cover:
- Object upload parameters
- Batched deletes and partial-failure reporting
- Presigned upload URLs
- Public URL construction
- Client construction from config
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from folio.config import StorageConfig
from folio.storage.s3 import DELETE_BATCH_SIZE, S3BlobStore


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(
        endpoint_url="https://acct.r2.cloudflarestorage.com",
        bucket="portfolio-media",
        access_key_id="key",
        secret_access_key="secret",
        public_base_url="https://pub-123.r2.dev/",
    )


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.delete_objects.return_value = {"Deleted": []}
    client.generate_presigned_url.return_value = "https://signed.example/upload"
    return client


@pytest.fixture
def store(storage_config, client) -> S3BlobStore:
    return S3BlobStore(storage_config, client=client)


class TestS3BlobStore:
    """Tests for S3BlobStore with a mocked boto3 client."""

    @pytest.mark.asyncio
    async def test_put(self, store, client):
        """Test that put uploads to the configured bucket."""
        await store.put("projects/a/hero.jpg", b"\xff\xd8", "image/jpeg")

        client.put_object.assert_called_once_with(
            Bucket="portfolio-media",
            Key="projects/a/hero.jpg",
            Body=b"\xff\xd8",
            ContentType="image/jpeg",
        )

    @pytest.mark.asyncio
    async def test_delete_batch_splits_requests(self, store, client):
        """Test that large deletes are split into requests of at most 1000 keys."""
        keys = [f"projects/a/{i}.jpg" for i in range(2500)]

        await store.delete_batch(keys)

        sizes = [
            len(call.kwargs["Delete"]["Objects"]) for call in client.delete_objects.call_args_list
        ]
        assert sizes == [DELETE_BATCH_SIZE, DELETE_BATCH_SIZE, 500]
        first = client.delete_objects.call_args_list[0].kwargs
        assert first["Bucket"] == "portfolio-media"
        assert first["Delete"]["Quiet"] is True
        assert first["Delete"]["Objects"][0] == {"Key": "projects/a/0.jpg"}

    @pytest.mark.asyncio
    async def test_delete_batch_empty(self, store, client):
        """Test that deleting nothing makes no request."""
        await store.delete_batch([])

        client.delete_objects.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_batch_reports_partial_failures(self, store, client):
        """Test that per-key errors are logged, not raised."""
        client.delete_objects.return_value = {
            "Errors": [{"Key": "projects/a/1.jpg", "Code": "AccessDenied"}]
        }

        with patch("folio.storage.s3.logger") as logger:
            await store.delete_batch(["projects/a/0.jpg", "projects/a/1.jpg"])

        logger.warning.assert_called_once_with(
            "blob_delete_partial", failed=["projects/a/1.jpg"]
        )

    @pytest.mark.asyncio
    async def test_delete_batch_propagates_client_errors(self, store, client):
        """Test that a failed request reaches the caller."""
        client.delete_objects.side_effect = RuntimeError("bucket unavailable")

        with pytest.raises(RuntimeError, match="bucket unavailable"):
            await store.delete_batch(["projects/a/0.jpg"])

    @pytest.mark.asyncio
    async def test_sign_put_url(self, store, client):
        """Test presigned PUT URL parameters."""
        url = await store.sign_put_url("projects/a/hero.jpg", "image/webp", 300)

        assert url == "https://signed.example/upload"
        client.generate_presigned_url.assert_called_once_with(
            "put_object",
            Params={
                "Bucket": "portfolio-media",
                "Key": "projects/a/hero.jpg",
                "ContentType": "image/webp",
            },
            ExpiresIn=300,
        )

    def test_public_url_for_key(self, store):
        """Test that keys are appended to the public base URL."""
        assert store.public_url_for_key("projects/a/hero.jpg") == (
            "https://pub-123.r2.dev/projects/a/hero.jpg"
        )
        assert store.public_url_for_key("/projects/a/hero.jpg") == (
            "https://pub-123.r2.dev/projects/a/hero.jpg"
        )

    def test_client_created_lazily_from_config(self, storage_config):
        """Test that the boto3 client is built once with the configured endpoint."""
        store = S3BlobStore(storage_config)

        with patch("folio.storage.s3.boto3.client") as factory:
            first = store.client
            second = store.client

        assert first is second
        factory.assert_called_once()
        args, kwargs = factory.call_args
        assert args == ("s3",)
        assert kwargs["endpoint_url"] == "https://acct.r2.cloudflarestorage.com"
        assert kwargs["region_name"] == "auto"
        assert kwargs["aws_access_key_id"] == "key"
        assert kwargs["aws_secret_access_key"] == "secret"
