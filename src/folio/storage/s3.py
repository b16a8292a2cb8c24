"""S3-compatible blob store (Cloudflare R2, MinIO, AWS S3).

boto3 is synchronous; every call is pushed to a worker thread with
``asyncio.to_thread`` so it never blocks the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import boto3
import structlog
from botocore.config import Config as BotoConfig

from folio.config import StorageConfig

logger = structlog.get_logger(__name__)

# S3 DeleteObjects accepts at most this many keys per request
DELETE_BATCH_SIZE = 1000


class S3BlobStore:
    """BlobStore backed by an S3 API endpoint.

    Attributes:
        config: Bucket, endpoint and credential settings.
    """

    def __init__(self, config: StorageConfig, client: Any | None = None) -> None:
        self.config = config
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily created, cached boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.config.endpoint_url,
                region_name=self.config.region,
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
        return self._client

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=self.config.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
        logger.info("blob_put", key=key, size_bytes=len(data))

    async def delete_batch(self, keys: Sequence[str]) -> None:
        """Delete objects in batches of at most DELETE_BATCH_SIZE keys."""
        keys = list(keys)
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            response = await asyncio.to_thread(
                self.client.delete_objects,
                Bucket=self.config.bucket,
                Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
            )
            errors = response.get("Errors") or []
            if errors:
                logger.warning(
                    "blob_delete_partial",
                    failed=[error.get("Key") for error in errors],
                )
            logger.info("blob_delete_batch", count=len(batch))

    async def sign_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        return await asyncio.to_thread(
            self.client.generate_presigned_url,
            "put_object",
            Params={"Bucket": self.config.bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=expires_in,
        )

    def public_url_for_key(self, key: str) -> str:
        return f"{self.config.public_base_url}/{key.lstrip('/')}"
