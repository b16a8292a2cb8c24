"""SQLAlchemy ORM models for Folio.

This module defines the database schema: draft projects, published
snapshots, version and history logs, media assets, and lookup entities.

All models use SQLAlchemy 2.0 declarative style with Mapped[] type annotations.
"""

from folio.database.models.base import Base, JSONDocument, TimestampMixin, utcnow
from folio.database.models.history import (
    HistoryAction,
    ProjectHistoryEntry,
    ProjectVersion,
    VersionSource,
)
from folio.database.models.lookup import Category, Collaborator, Service
from folio.database.models.media import MediaAsset, MediaKind
from folio.database.models.project import Project, ProjectStatus
from folio.database.models.published import PublishedProject

__all__ = [
    "Base",
    "JSONDocument",
    "TimestampMixin",
    "utcnow",
    "Project",
    "ProjectStatus",
    "PublishedProject",
    "ProjectVersion",
    "VersionSource",
    "ProjectHistoryEntry",
    "HistoryAction",
    "MediaAsset",
    "MediaKind",
    "Category",
    "Service",
    "Collaborator",
]
