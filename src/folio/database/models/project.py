"""Project model for Folio.

Defines the Project table (the mutable, authoritative draft document) and
the ProjectStatus enum.

Ordered sub-lists (description blocks, meta rows, services, collaborators,
gallery items) are stored as JSON arrays of tagged records. Each record
carries its own ``id`` and an ``order`` integer; the record shapes are
defined in ``folio.engine.documents``.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from folio.database.models.base import Base, JSONDocument, TimestampMixin


class ProjectStatus(enum.Enum):
    """Publishing lifecycle status for a project.

    States:
        draft: Being edited; not visible on the public read path.
        published: A snapshot is live on the public read path.
        archived: Soft-deleted. Terminal.
    """

    draft = "draft"
    published = "published"
    archived = "archived"


class Project(TimestampMixin, Base):
    """A portfolio project draft.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        slug: URL identifier, unique among non-deleted projects.
        title: Display title.
        title_sort: Accent-free lowercase title for alphabetical ordering.
        category_id: Resolved Category row.
        category_label: Category text as entered.
        location: Free-text location.
        year_display: ``YYYY`` or ``YYYY-YY``.
        status: Current lifecycle status.
        revision: Monotonic counter, incremented on every committed mutation.
        hero: Hero image record (asset_id, src, width, height, caption).
        excerpt: Short summary.
        description_blocks: Ordered paragraph records.
        meta: Ordered label/value records.
        services: Ordered service reference records.
        collaborators: Ordered collaborator reference records.
        gallery: Ordered gallery image records.
        search_tokens: Denormalized tokens for free-text search.
        created_by / updated_by / published_by: Acting principals.
        published_at: When the live snapshot was last stamped.
        deleted_at: Soft-delete marker.
    """

    __tablename__ = "projects"
    __table_args__ = (
        Index(
            "uq_projects_slug_live",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("idx_projects_status_updated", "status", "updated_at"),
        Index("idx_projects_title_sort", "title_sort"),
    )

    slug: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_sort: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
    )
    category_label: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(Text, nullable=False, default="")
    year_display: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ProjectStatus] = mapped_column(
        default=ProjectStatus.draft,
        nullable=False,
    )
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    hero: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description_blocks: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    meta: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    services: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    collaborators: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    gallery: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    search_tokens: Mapped[list[str]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
