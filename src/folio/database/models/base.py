"""SQLAlchemy declarative base and common column mixins for Folio.

This module defines the DeclarativeBase class, a TimestampMixin that
provides id, created_at, and updated_at columns shared across all models,
and the portable JSON column type used for embedded sub-documents. Enum
columns store each member's value (``manual-save``), not its name.

Example:
    >>> class MyModel(TimestampMixin, Base):
    ...     __tablename__ = "my_table"
    ...     name: Mapped[str] = mapped_column(Text, nullable=False)
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware current time used for all engine timestamps."""
    return datetime.now(timezone.utc)


def enum_values(members: type[enum.Enum]) -> list[str]:
    """Database labels of an enum: member values in definition order."""
    return [member.value for member in members]


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base for all Folio models."""

    type_annotation_map = {
        enum.Enum: SAEnum(enum.Enum, values_callable=enum_values),
    }


class TimestampMixin:
    """Mixin providing id (UUID), created_at, and updated_at columns.

    Values are generated client-side so that rows carry their identifiers
    before flush and behave identically on PostgreSQL and SQLite.

    Attributes:
        id: UUID primary key.
        created_at: Timestamp set on row creation.
        updated_at: Timestamp set on creation and refreshed on each update.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
