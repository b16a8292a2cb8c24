"""Version and history recording.

Both writers run inside the mutation's transaction, after the project and
snapshot writes, so a version or history row is never visible without the
project state it describes.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.history import (
    HistoryAction,
    ProjectHistoryEntry,
    ProjectVersion,
    VersionSource,
)
from folio.database.models.project import Project, ProjectStatus

logger = structlog.get_logger(__name__)


def serialize_project(project: Project) -> dict[str, Any]:
    """Full JSON-safe copy of a project row, used as the version payload."""
    return {
        "id": str(project.id),
        "slug": project.slug,
        "title": project.title,
        "title_sort": project.title_sort,
        "category_id": str(project.category_id) if project.category_id else None,
        "category_label": project.category_label,
        "location": project.location,
        "year_display": project.year_display,
        "status": project.status.value,
        "revision": project.revision,
        "hero": project.hero,
        "excerpt": project.excerpt,
        "description_blocks": project.description_blocks,
        "meta": project.meta,
        "services": project.services,
        "collaborators": project.collaborators,
        "gallery": project.gallery,
        "search_tokens": project.search_tokens,
        "created_by": project.created_by,
        "updated_by": project.updated_by,
        "published_by": project.published_by,
        "published_at": project.published_at.isoformat() if project.published_at else None,
        "deleted_at": project.deleted_at.isoformat() if project.deleted_at else None,
    }


async def record_version(
    session: AsyncSession,
    project: Project,
    source: VersionSource,
    actor: str,
    published: bool = False,
) -> ProjectVersion:
    """Append the version row for the project's current revision.

    Args:
        session: Session of the running mutation transaction.
        project: Project after the mutation (revision already incremented).
        source: Operation that produced the version.
        actor: Acting principal.
        published: Whether this version is the live one.
    """
    version = ProjectVersion(
        project_id=project.id,
        version=project.revision,
        status=project.status,
        source=source,
        payload=serialize_project(project),
        published=published,
        created_by=actor,
    )
    session.add(version)
    await session.flush()
    logger.debug(
        "project_version_recorded",
        project_id=str(project.id),
        version=project.revision,
        source=source.value,
    )
    return version


async def record_history(
    session: AsyncSession,
    project_id: uuid.UUID,
    action: HistoryAction,
    actor: str,
    from_status: ProjectStatus | None = None,
    to_status: ProjectStatus | None = None,
    snapshot_version: int | None = None,
    summary: str | None = None,
) -> ProjectHistoryEntry:
    """Append one entry to the project's audit log."""
    entry = ProjectHistoryEntry(
        project_id=project_id,
        action=action,
        actor=actor,
        from_status=from_status,
        to_status=to_status,
        snapshot_version=snapshot_version,
        summary=summary,
    )
    session.add(entry)
    await session.flush()
    return entry
