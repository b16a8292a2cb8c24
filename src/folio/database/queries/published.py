"""Published snapshot query functions for Folio.

Read helpers used both by the publishing state machine (inside its
transaction) and by the public read path.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.published import PublishedProject


async def get_published_for_project(
    session: AsyncSession,
    project_id: UUID,
) -> PublishedProject | None:
    """Retrieve the snapshot of a project, if it is published."""
    stmt = select(PublishedProject).where(PublishedProject.project_id == project_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_published_by_slug(
    session: AsyncSession,
    slug: str,
) -> PublishedProject | None:
    """Retrieve a snapshot by its public slug."""
    stmt = select(PublishedProject).where(PublishedProject.slug == slug)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_published(session: AsyncSession) -> list[PublishedProject]:
    """List all snapshots, most recently published first."""
    stmt = select(PublishedProject).order_by(PublishedProject.published_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_published_slugs(session: AsyncSession) -> list[str]:
    """Slugs of every published project, for static path generation."""
    result = await session.execute(
        select(PublishedProject.slug).order_by(PublishedProject.published_at.desc())
    )
    return list(result.scalars().all())


async def delete_published_for_project(
    session: AsyncSession,
    project_id: UUID,
) -> bool:
    """Delete a project's snapshot.

    Returns:
        True if a snapshot row was removed.
    """
    stmt = delete(PublishedProject).where(PublishedProject.project_id == project_id)
    result = await session.execute(stmt)
    return result.rowcount > 0
