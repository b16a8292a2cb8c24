"""Published project snapshot model for Folio.

A PublishedProject row is the flattened, public-facing copy of a published
Project. It exists exactly while its source project has status ``published``
and is written only by the publishing state machine.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from folio.database.models.base import Base, JSONDocument, TimestampMixin


class PublishedProject(TimestampMixin, Base):
    """Read-optimized snapshot served to public readers.

    Attributes:
        project_id: Source project (unique; one snapshot per project).
        slug: Public URL identifier (unique).
        title, category_label, location, year_display, excerpt: Copied fields.
        hero: Hero image record.
        description_blocks, meta, services, collaborators, gallery:
            Ordered records with ``order`` values re-sequenced to 0..n-1.
        published_at: Publish stamp copied from the project.
        synced_at: When this snapshot was last written.
    """

    __tablename__ = "published_projects"

    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id"),
        nullable=False,
        unique=True,
    )
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    category_label: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    year_display: Mapped[str] = mapped_column(Text, nullable=False)
    hero: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
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
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
