"""Initial schema for Folio.

Creates the lookup tables (categories, services, collaborators), projects,
published_projects, project_versions, project_history and media_assets,
plus the partial unique index that keeps slugs unique among non-deleted
projects.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum labels are the member values, matching the SQLAlchemy models
PROJECT_STATUS = ("draft", "published", "archived")
VERSION_SOURCE = ("manual-save", "publish", "unpublish")
HISTORY_ACTION = ("created", "duplicated", "saved", "published", "unpublished", "deleted")
MEDIA_KIND = ("hero", "gallery")


def _enum(values: tuple[str, ...], name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    sa.Enum(*PROJECT_STATUS, name="projectstatus").create(bind, checkfirst=True)
    sa.Enum(*VERSION_SOURCE, name="versionsource").create(bind, checkfirst=True)
    sa.Enum(*HISTORY_ACTION, name="historyaction").create(bind, checkfirst=True)
    sa.Enum(*MEDIA_KIND, name="mediakind").create(bind, checkfirst=True)

    # Lookup tables
    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("label", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "collaborators",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("organization", sa.Text(), nullable=False, server_default=""),
        sa.Column("role_default", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_by", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("display_name", "organization", name="uq_collaborators_name_org"),
    )

    # Projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("title_sort", sa.Text(), nullable=False, server_default=""),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("category_label", sa.Text(), nullable=False, server_default=""),
        sa.Column("location", sa.Text(), nullable=False, server_default=""),
        sa.Column("year_display", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "status",
            _enum(PROJECT_STATUS, "projectstatus"),
            nullable=False,
            server_default="draft",
        ),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("hero", JSONB, nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("description_blocks", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("meta", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("services", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("collaborators", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("gallery", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("search_tokens", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.Text(), nullable=True),
        sa.Column("published_by", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_projects_slug_live",
        "projects",
        ["slug"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )
    op.create_index("idx_projects_status_updated", "projects", ["status", "updated_at"])
    op.create_index("idx_projects_title_sort", "projects", ["title_sort"])

    # Published snapshots
    op.create_table(
        "published_projects",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column(
            "project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False, unique=True
        ),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("category_label", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("year_display", sa.Text(), nullable=False),
        sa.Column("hero", JSONB, nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("description_blocks", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("meta", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("services", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("collaborators", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("gallery", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("synced_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )

    # Append-only audit tables
    op.create_table(
        "project_versions",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("status", _enum(PROJECT_STATUS, "projectstatus"), nullable=False),
        sa.Column("source", _enum(VERSION_SOURCE, "versionsource"), nullable=False),
        sa.Column("payload", JSONB, nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "version", name="uq_project_versions_project_version"),
    )
    op.create_index(
        "idx_project_versions_project_source", "project_versions", ["project_id", "source"]
    )

    op.create_table(
        "project_history",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("action", _enum(HISTORY_ACTION, "historyaction"), nullable=False),
        sa.Column("from_status", _enum(PROJECT_STATUS, "projectstatus"), nullable=True),
        sa.Column("to_status", _enum(PROJECT_STATUS, "projectstatus"), nullable=True),
        sa.Column("actor", sa.Text(), nullable=True),
        sa.Column("snapshot_version", sa.Integer(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_project_history_project", "project_history", ["project_id", "created_at"])

    # Media assets
    op.create_table(
        "media_assets",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("storage_key", sa.Text(), nullable=False, unique=True),
        sa.Column("public_url", sa.Text(), nullable=False),
        sa.Column("kind", _enum(MEDIA_KIND, "mediakind"), nullable=False),
        sa.Column("width", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("height", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("format", sa.Text(), nullable=False),
        sa.Column("file_size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_media_assets_public_url", "media_assets", ["public_url"])
    op.create_index("idx_media_assets_kind", "media_assets", ["kind"])


def downgrade() -> None:
    op.drop_table("media_assets")
    op.drop_table("project_history")
    op.drop_table("project_versions")
    op.drop_table("published_projects")
    op.drop_table("projects")
    op.drop_table("collaborators")
    op.drop_table("services")
    op.drop_table("categories")

    # Drop enum types
    bind = op.get_bind()
    sa.Enum(name="mediakind").drop(bind, checkfirst=True)
    sa.Enum(name="historyaction").drop(bind, checkfirst=True)
    sa.Enum(name="versionsource").drop(bind, checkfirst=True)
    sa.Enum(name="projectstatus").drop(bind, checkfirst=True)
