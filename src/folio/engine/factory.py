"""Wiring of the engine services from configuration."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.config import FolioConfig
from folio.engine.gc import AssetGarbageCollector
from folio.engine.media import MediaService
from folio.engine.publisher import ProjectPublisher
from folio.engine.snapshot import PublicReader
from folio.engine.transactions import RetryPolicy, TransactionCoordinator
from folio.storage.base import BlobStore


@dataclass
class FolioEngine:
    """The engine's public services sharing one coordinator and collector."""

    coordinator: TransactionCoordinator
    collector: AssetGarbageCollector
    publisher: ProjectPublisher
    media: MediaService
    reader: PublicReader

    async def aclose(self) -> None:
        """Let scheduled asset sweeps finish."""
        await self.collector.drain()


def build_engine(
    config: FolioConfig,
    session_factory: async_sessionmaker[AsyncSession],
    blob_store: BlobStore,
) -> FolioEngine:
    """Assemble the engine services for ``config``."""
    coordinator = TransactionCoordinator(
        session_factory,
        policy=RetryPolicy.from_config(config.transaction),
        timeout_seconds=config.transaction.timeout_seconds,
    )
    collector = AssetGarbageCollector(session_factory, blob_store)
    proxy_path = config.storage.media_proxy_path
    return FolioEngine(
        coordinator=coordinator,
        collector=collector,
        publisher=ProjectPublisher(
            coordinator,
            collector,
            system_actor=config.publishing.system_actor,
            live_save_policy=config.publishing.live_save_policy,
            proxy_path=proxy_path,
        ),
        media=MediaService(
            coordinator,
            blob_store,
            upload_url_expiry=config.storage.upload_url_expiry_seconds,
            actor=config.publishing.system_actor,
        ),
        reader=PublicReader(session_factory, proxy_path=proxy_path),
    )
