"""Blob store interface consumed by the engine."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class BlobStore(Protocol):
    """Object storage holding media binaries.

    Implementations must be safe to call concurrently from several tasks.
    """

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        ...

    async def delete_batch(self, keys: Sequence[str]) -> None:
        ...

    async def sign_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        ...

    def public_url_for_key(self, key: str) -> str:
        ...
