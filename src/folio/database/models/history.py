"""Append-only audit models for Folio.

ProjectVersion stores a full serialized copy of a project after each
committed mutation. ProjectHistoryEntry is the lightweight event log. Neither
table is ever updated or deleted from by the engine.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from folio.database.models.base import Base, JSONDocument, utcnow
from folio.database.models.project import ProjectStatus


class VersionSource(enum.Enum):
    """Which operation produced a version row."""

    manual_save = "manual-save"
    publish = "publish"
    unpublish = "unpublish"


class HistoryAction(enum.Enum):
    """Event recorded in the project history log."""

    created = "created"
    duplicated = "duplicated"
    saved = "saved"
    published = "published"
    unpublished = "unpublished"
    deleted = "deleted"


class ProjectVersion(Base):
    """Immutable snapshot of a project at one revision.

    Attributes:
        id: UUID primary key.
        project_id: Owning project.
        version: Equal to the project's revision after the mutation.
        status: Project status at write time.
        source: Operation that produced this version.
        payload: Full serialized project.
        published: Whether this version went live.
        created_by: Acting principal.
        created_at: Write time.
    """

    __tablename__ = "project_versions"
    __table_args__ = (
        UniqueConstraint("project_id", "version", name="uq_project_versions_project_version"),
        Index("idx_project_versions_project_source", "project_id", "source"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(nullable=False)
    source: Mapped[VersionSource] = mapped_column(nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ProjectHistoryEntry(Base):
    """One event in a project's audit log.

    Attributes:
        id: UUID primary key.
        project_id: Project the event belongs to.
        action: What happened.
        from_status: Status before the event (None on creation).
        to_status: Status after the event.
        actor: Acting principal.
        snapshot_version: Revision written by the event, when one was.
        summary: Optional free-text note.
        created_at: Event time.
    """

    __tablename__ = "project_history"
    __table_args__ = (Index("idx_project_history_project", "project_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    action: Mapped[HistoryAction] = mapped_column(nullable=False)
    from_status: Mapped[ProjectStatus | None] = mapped_column(nullable=True)
    to_status: Mapped[ProjectStatus | None] = mapped_column(nullable=True)
    actor: Mapped[str | None] = mapped_column(Text, nullable=True)
    snapshot_version: Mapped[int | None] = mapped_column(Integer, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
