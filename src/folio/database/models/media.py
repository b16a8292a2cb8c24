"""Media asset model for Folio.

A MediaAsset row describes one binary object in the blob store. Its lifetime
is decided by scanning live projects and published snapshots for references,
never by its own columns; ``project_id`` is informational only.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from folio.database.models.base import Base, TimestampMixin


class MediaKind(enum.Enum):
    """Role an image plays on a project page."""

    hero = "hero"
    gallery = "gallery"


class MediaAsset(TimestampMixin, Base):
    """Metadata for one stored image.

    Attributes:
        storage_key: Object key in the blob store (unique).
        public_url: URL the object is served from.
        kind: hero or gallery.
        width / height: Pixel dimensions.
        format: File extension (jpg, png, webp, avif, ...).
        file_size_bytes: Byte size, 0 when unknown.
        project_id: Project the upload was made for (informational).
        created_by: Acting principal.
        deleted_at: Soft-delete marker.
    """

    __tablename__ = "media_assets"
    __table_args__ = (
        Index("idx_media_assets_public_url", "public_url"),
        Index("idx_media_assets_kind", "kind"),
    )

    storage_key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    public_url: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[MediaKind] = mapped_column(nullable=False)
    width: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    height: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    format: Mapped[str] = mapped_column(Text, nullable=False)
    file_size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    project_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
