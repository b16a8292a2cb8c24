"""Post-commit asset garbage collection.

After a mutation commits, the assets it stopped referencing are handed to
the collector. Each candidate is re-checked against every live project and
every snapshot at collection time, so an asset still used elsewhere
survives. Collection runs in its own short transaction, outside the
mutation's, and its failures never reach the mutation's caller.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.database.queries.media import delete_assets, get_assets, referenced_asset_ids
from folio.errors import AssetCleanupError
from folio.storage.base import BlobStore

logger = structlog.get_logger(__name__)


def _parse_ids(asset_ids: Iterable[str]) -> list[uuid.UUID]:
    parsed = []
    for value in asset_ids:
        try:
            parsed.append(uuid.UUID(str(value)))
        except ValueError:
            logger.debug("asset_cleanup_skipped_invalid_id", asset_id=value)
    return parsed


class AssetGarbageCollector:
    """Deletes unreferenced MediaAsset rows and their blobs.

    Attributes:
        session_factory: Source of sessions for the cleanup transaction.
        blob_store: Store the binaries are removed from.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_store: BlobStore,
    ) -> None:
        self.session_factory = session_factory
        self.blob_store = blob_store
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of scheduled sweeps that have not finished."""
        return len(self._tasks)

    def schedule(self, asset_ids: Iterable[str]) -> asyncio.Task[None] | None:
        """Start a background sweep for ``asset_ids`` without awaiting it.

        Returns:
            The sweep task, or None when there is nothing to collect.
        """
        candidates = sorted(set(asset_ids))
        if not candidates:
            return None
        task = asyncio.create_task(self._sweep(candidates))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled sweep, including ones scheduled meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _sweep(self, asset_ids: list[str]) -> None:
        try:
            await self.collect(asset_ids)
        except AssetCleanupError as exc:
            logger.error(
                "asset_cleanup_failed",
                asset_ids=asset_ids,
                error=str(exc),
                cause=repr(exc.__cause__),
            )

    async def collect(self, asset_ids: Iterable[str]) -> list[str]:
        """Delete the candidates nothing references any more.

        Args:
            asset_ids: Candidate asset IDs.

        Returns:
            Storage keys of the assets that were deleted.

        Raises:
            AssetCleanupError: If the row deletion or the blob delete failed.
        """
        ids = _parse_ids(asset_ids)
        if not ids:
            return []

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    candidates = await get_assets(session, ids)
                    referenced = await referenced_asset_ids(session)
                    deletable = [asset for asset in candidates if str(asset.id) not in referenced]
                    await delete_assets(session, [asset.id for asset in deletable])
                    keys = [asset.storage_key for asset in deletable if asset.storage_key]
        except Exception as exc:
            raise AssetCleanupError(f"Failed to delete asset rows: {exc}") from exc

        retained = len(ids) - len(keys)
        if keys:
            try:
                await self.blob_store.delete_batch(keys)
            except Exception as exc:
                raise AssetCleanupError(
                    f"Asset rows deleted but {len(keys)} blobs remain: {exc}"
                ) from exc

        logger.info("assets_collected", deleted=len(keys), retained=retained)
        return keys
