"""Blob storage adapters for Folio media."""

from folio.storage.base import BlobStore
from folio.storage.s3 import DELETE_BATCH_SIZE, S3BlobStore

__all__ = ["BlobStore", "S3BlobStore", "DELETE_BATCH_SIZE"]
