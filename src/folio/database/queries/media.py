"""Media asset query functions for Folio.

Lookup helpers for the asset binder and the reference scan used by the
asset garbage collector.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.media import MediaAsset
from folio.database.models.project import Project
from folio.database.models.published import PublishedProject


async def get_asset(session: AsyncSession, asset_id: UUID) -> MediaAsset | None:
    """Retrieve a media asset by ID."""
    stmt = select(MediaAsset).where(MediaAsset.id == asset_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def find_asset_by_public_url(
    session: AsyncSession,
    public_url: str,
) -> MediaAsset | None:
    """Retrieve the asset served from ``public_url``."""
    stmt = select(MediaAsset).where(MediaAsset.public_url == public_url).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def find_asset_by_storage_key(
    session: AsyncSession,
    storage_key: str,
) -> MediaAsset | None:
    """Retrieve the asset stored under ``storage_key``."""
    stmt = select(MediaAsset).where(MediaAsset.storage_key == storage_key)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_assets(
    session: AsyncSession,
    asset_ids: Iterable[UUID],
) -> list[MediaAsset]:
    """Retrieve every asset whose ID is in ``asset_ids``."""
    ids = list(asset_ids)
    if not ids:
        return []
    stmt = select(MediaAsset).where(MediaAsset.id.in_(ids))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def delete_assets(session: AsyncSession, asset_ids: Iterable[UUID]) -> int:
    """Hard-delete asset rows. Returns the number of rows removed."""
    ids = list(asset_ids)
    if not ids:
        return 0
    result = await session.execute(delete(MediaAsset).where(MediaAsset.id.in_(ids)))
    return result.rowcount


def collect_asset_ids(
    hero: dict[str, Any] | None,
    gallery: list[dict[str, Any]] | None,
) -> set[str]:
    """Every asset ID referenced by a hero record and gallery records."""
    ids: set[str] = set()
    if hero and hero.get("asset_id"):
        ids.add(str(hero["asset_id"]))
    for item in gallery or []:
        if item.get("asset_id"):
            ids.add(str(item["asset_id"]))
    return ids


async def referenced_asset_ids(session: AsyncSession) -> set[str]:
    """Collect every asset ID referenced by a live project or any snapshot.

    Scans hero and gallery records of non-deleted projects and of all
    published snapshots.

    Returns:
        Set of asset IDs as strings.
    """
    referenced: set[str] = set()

    projects = await session.execute(
        select(Project.hero, Project.gallery).where(Project.deleted_at.is_(None))
    )
    for hero, gallery in projects:
        referenced |= collect_asset_ids(hero, gallery)

    snapshots = await session.execute(
        select(PublishedProject.hero, PublishedProject.gallery)
    )
    for hero, gallery in snapshots:
        referenced |= collect_asset_ids(hero, gallery)

    return referenced
