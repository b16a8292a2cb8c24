"""Published snapshot maintenance and the public read path.

The snapshot is written only from inside a publishing transaction. The
reader below never writes; it opens its own short session per call.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.database.models.base import utcnow
from folio.database.models.project import Project
from folio.database.models.published import PublishedProject
from folio.database.queries.published import (
    delete_published_for_project,
    get_published_by_slug,
    get_published_for_project,
    list_published,
    list_published_slugs,
)
from folio.engine.documents import resequence
from folio.engine.media_urls import DEFAULT_PROXY_PATH
from folio.engine.views import PublicProject, to_public_project

logger = structlog.get_logger(__name__)


async def upsert_snapshot(session: AsyncSession, project: Project) -> PublishedProject:
    """Create or refresh the snapshot keyed by ``project.id``.

    Sub-lists are copied in display order with ``order`` re-sequenced.
    """
    now = utcnow()
    fields = {
        "slug": project.slug,
        "title": project.title,
        "category_label": project.category_label,
        "location": project.location,
        "year_display": project.year_display,
        "hero": dict(project.hero) if project.hero else None,
        "excerpt": project.excerpt,
        "description_blocks": resequence(project.description_blocks),
        "meta": resequence(project.meta),
        "services": resequence(project.services),
        "collaborators": resequence(project.collaborators),
        "gallery": resequence(project.gallery),
        "published_at": project.published_at or now,
        "synced_at": now,
    }

    snapshot = await get_published_for_project(session, project.id)
    if snapshot is None:
        snapshot = PublishedProject(project_id=project.id, **fields)
        session.add(snapshot)
    else:
        for name, value in fields.items():
            setattr(snapshot, name, value)
    await session.flush()

    logger.debug("snapshot_upserted", project_id=str(project.id), slug=project.slug)
    return snapshot


async def remove_snapshot(session: AsyncSession, project_id: uuid.UUID) -> bool:
    """Delete the project's snapshot. Returns True if one existed."""
    removed = await delete_published_for_project(session, project_id)
    if removed:
        logger.debug("snapshot_removed", project_id=str(project_id))
    return removed


class PublicReader:
    """Read-only access to published snapshots."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        proxy_path: str = DEFAULT_PROXY_PATH,
    ) -> None:
        self.session_factory = session_factory
        self.proxy_path = proxy_path

    async def get_project(self, slug: str) -> PublicProject | None:
        """Published project by slug, or None when nothing is live there."""
        async with self.session_factory() as session:
            snapshot = await get_published_by_slug(session, slug)
            if snapshot is None:
                return None
            return to_public_project(snapshot, self.proxy_path)

    async def list_projects(self) -> list[PublicProject]:
        """All published projects, newest publish first."""
        async with self.session_factory() as session:
            snapshots = await list_published(session)
            return [to_public_project(snapshot, self.proxy_path) for snapshot in snapshots]

    async def list_slugs(self) -> list[str]:
        async with self.session_factory() as session:
            return await list_published_slugs(session)
