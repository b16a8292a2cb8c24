"""Pytest fixtures for integration tests.

Provides the engine services wired against a SQLite database file created
per test. A file is used rather than ``:memory:`` because the coordinator,
the garbage collector and the public reader each open their own sessions
and must all see the same data. The blob store is an in-process fake that
records what it was asked to do.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from folio.config import LiveSavePolicy
from folio.database.models.base import Base
from folio.engine.documents import GalleryInput, MetaInput, ProjectPayload
from folio.engine.gc import AssetGarbageCollector
from folio.engine.media import MediaService
from folio.engine.publisher import ProjectPublisher
from folio.engine.snapshot import PublicReader
from folio.engine.transactions import RetryPolicy, TransactionCoordinator

PUBLIC_HOST = "https://pub-test.r2.dev"

PARAGRAPH_ONE = (
    "The brief asked for a lantern on the hill: a timber pavilion that glows at dusk "
    "and frames the valley from every seat."
)
PARAGRAPH_TWO = (
    "Cross-laminated panels were prefabricated off site, keeping the build to six weeks "
    "and the footprint on the meadow to a minimum."
)


class FakeBlobStore:
    """BlobStore double that keeps every call in memory.

    Attributes:
        objects: Keys written with ``put``.
        deleted: Keys passed to ``delete_batch``, in call order.
        fail_deletes: Make ``delete_batch`` raise.
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_deletes = False

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = data

    async def delete_batch(self, keys: Sequence[str]) -> None:
        if self.fail_deletes:
            raise RuntimeError("bucket unavailable")
        self.deleted.extend(keys)
        for key in keys:
            self.objects.pop(key, None)

    async def sign_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        return f"https://uploads.test/{key}?expires={expires_in}"

    def public_url_for_key(self, key: str) -> str:
        return f"{PUBLIC_HOST}/{key}"


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite async engine with the full schema.

    Yields:
        Configured AsyncEngine instance.
    """
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'folio.db'}",
        echo=False,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a session for inspecting rows the engine committed.

    Yields:
        AsyncSession instance for the test.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def coordinator(session_factory: async_sessionmaker[AsyncSession]) -> TransactionCoordinator:
    """Coordinator with the default attempt budget and no backoff sleep."""
    return TransactionCoordinator(
        session_factory,
        policy=RetryPolicy(max_attempts=3, base_delay=0.1),
        timeout_seconds=10.0,
        sleep=_no_sleep,
    )


@pytest_asyncio.fixture
async def collector(
    session_factory: async_sessionmaker[AsyncSession],
    blob_store: FakeBlobStore,
) -> AsyncGenerator[AssetGarbageCollector, None]:
    """Asset collector that is drained before the database goes away."""
    gc = AssetGarbageCollector(session_factory, blob_store)
    yield gc
    await gc.drain()


@pytest.fixture
def publisher(
    coordinator: TransactionCoordinator,
    collector: AssetGarbageCollector,
) -> ProjectPublisher:
    return ProjectPublisher(coordinator, collector, system_actor="system")


@pytest.fixture
def deferring_publisher(
    coordinator: TransactionCoordinator,
    collector: AssetGarbageCollector,
) -> ProjectPublisher:
    """Publisher whose saves leave a live snapshot untouched."""
    return ProjectPublisher(
        coordinator,
        collector,
        system_actor="system",
        live_save_policy=LiveSavePolicy.defer,
    )


@pytest.fixture
def media_service(
    coordinator: TransactionCoordinator,
    blob_store: FakeBlobStore,
) -> MediaService:
    return MediaService(coordinator, blob_store, upload_url_expiry=300, actor="system")


@pytest.fixture
def reader(session_factory: async_sessionmaker[AsyncSession]) -> PublicReader:
    return PublicReader(session_factory)


@pytest.fixture
def make_payload() -> Callable[..., ProjectPayload]:
    """Factory for editor payloads.

    With no arguments the payload passes strict validation: hero image,
    three captioned gallery images, two long paragraphs, three meta rows,
    one service and one collaborator. Keyword arguments override fields.
    """

    def _make(slug: str = "lantern-house", **overrides: object) -> ProjectPayload:
        fields: dict[str, object] = {
            "slug": slug,
            "title": "Lantern House",
            "category": "Residential",
            "location": "Lisbon, Portugal",
            "year": "2024",
            "hero_image": f"{PUBLIC_HOST}/projects/{slug}/hero.jpg",
            "hero_caption": "The pavilion at dusk",
            "excerpt": "A timber pavilion that glows above the valley.",
            "description": [PARAGRAPH_ONE, PARAGRAPH_TWO],
            "meta": [
                MetaInput(label="Location", value="Lisbon"),
                MetaInput(label="Year", value="2024"),
                MetaInput(label="Area", value="120 m2"),
            ],
            "services": ["Architecture"],
            "collaborators": ["Ana Sousa — Atelier Norte"],
            "gallery": [
                GalleryInput(
                    src=f"{PUBLIC_HOST}/projects/{slug}/gallery-{index}.jpg",
                    caption=f"View {index}",
                    width=2400,
                    height=1600,
                )
                for index in range(1, 4)
            ],
        }
        fields.update(overrides)
        return ProjectPayload(**fields)

    return _make
