"""Project query functions for Folio.

Provides async read helpers for Project records using the SQLAlchemy 2.0
select() API. These functions never open or commit a transaction; the
caller (normally the transaction coordinator) owns the boundary.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.project import Project
from folio.database.models.published import PublishedProject

logger = structlog.get_logger(__name__)


async def get_live_project(
    session: AsyncSession,
    project_id: UUID,
    for_update: bool = False,
) -> Project | None:
    """Retrieve a non-deleted project by ID.

    Args:
        session: Active async database session.
        project_id: UUID of the project to retrieve.
        for_update: Take a row lock (ignored by SQLite).

    Returns:
        The Project instance if found and not archived, None otherwise.
    """
    stmt = select(Project).where(
        Project.id == project_id,
        Project.deleted_at.is_(None),
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_live_projects(session: AsyncSession) -> list[Project]:
    """List all non-deleted projects, most recently updated first.

    Args:
        session: Active async database session.

    Returns:
        List of Project instances.
    """
    stmt = (
        select(Project)
        .where(Project.deleted_at.is_(None))
        .order_by(Project.updated_at.desc(), Project.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def slug_in_use(
    session: AsyncSession,
    slug: str,
    ignore_id: UUID | None = None,
) -> bool:
    """Check whether a project other than ``ignore_id`` holds ``slug``.

    A slug is held by a non-deleted project's draft, and also by a live
    snapshot whose draft has since moved to another slug.

    Args:
        session: Active async database session.
        slug: Candidate slug.
        ignore_id: Project allowed to keep the slug (the one being saved).

    Returns:
        True if the slug is taken.
    """
    drafts = select(Project.id).where(
        Project.slug == slug,
        Project.deleted_at.is_(None),
    )
    snapshots = select(PublishedProject.project_id).where(PublishedProject.slug == slug)
    if ignore_id is not None:
        drafts = drafts.where(Project.id != ignore_id)
        snapshots = snapshots.where(PublishedProject.project_id != ignore_id)

    for stmt in (drafts, snapshots):
        result = await session.execute(stmt.limit(1))
        if result.first() is not None:
            return True
    return False
