"""Database layer for Folio.

This module handles database connections, session management, and provides
the SQLAlchemy async engine configuration.

Public API:
    get_engine: Create an AsyncEngine from DatabaseConfig.
    get_session_factory: Create an async_sessionmaker from an engine.
    Base: SQLAlchemy declarative base for all models.
"""

from folio.database.connection import get_engine, get_session_factory
from folio.database.models import (
    Base,
    Category,
    Collaborator,
    HistoryAction,
    MediaAsset,
    MediaKind,
    Project,
    ProjectHistoryEntry,
    ProjectStatus,
    ProjectVersion,
    PublishedProject,
    Service,
    TimestampMixin,
    VersionSource,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "Base",
    "TimestampMixin",
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
