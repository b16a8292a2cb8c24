"""Lookup entities referenced by projects: categories, services, collaborators.

Rows are created on first use by the reference resolver and never deleted
by the engine.
"""

from __future__ import annotations

from sqlalchemy import Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from folio.database.models.base import Base, TimestampMixin


class Category(TimestampMixin, Base):
    """Project category, keyed by slug."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)


class Service(TimestampMixin, Base):
    """Service offered on a project (e.g. "Interior Design"), keyed by slug."""

    __tablename__ = "services"

    label: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)


class Collaborator(TimestampMixin, Base):
    """External collaborator, keyed by (display_name, organization)."""

    __tablename__ = "collaborators"
    __table_args__ = (
        UniqueConstraint(
            "display_name", "organization", name="uq_collaborators_name_org"
        ),
    )

    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    organization: Mapped[str] = mapped_column(Text, nullable=False, default="")
    role_default: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)
