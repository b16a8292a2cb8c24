"""Response models returned by the engine.

Stored rows keep raw storage keys; every URL in these views has been passed
through ``resolve_media_url`` so callers can render them directly.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from folio.database.models.project import Project, ProjectStatus
from folio.database.models.published import PublishedProject
from folio.engine.documents import sort_by_order
from folio.engine.media_urls import DEFAULT_PROXY_PATH, resolve_media_url


class MetaView(BaseModel):
    label: str
    value: str


class AdminGalleryView(BaseModel):
    asset_id: str | None = None
    src: str
    caption: str
    width: int | None = None
    height: int | None = None


class AdminProject(BaseModel):
    """Editor-facing view of a draft: the form payload plus id and status."""

    id: str
    slug: str
    title: str
    category: str
    location: str
    year: str
    hero_image: str
    hero_asset_id: str | None = None
    hero_caption: str
    excerpt: str
    description: list[str] = Field(default_factory=list)
    meta: list[MetaView] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    collaborators: list[str] = Field(default_factory=list)
    gallery: list[AdminGalleryView] = Field(default_factory=list)
    status: ProjectStatus
    revision: int
    last_edited: datetime | None = None
    published_at: datetime | None = None


class PublicGalleryView(BaseModel):
    image: str
    caption: str
    width: int | None = None
    height: int | None = None


class PublicProject(BaseModel):
    """Reader-facing view of a published snapshot."""

    id: str
    slug: str
    title: str
    category: str
    location: str
    year: str
    hero_image: str
    hero_caption: str
    excerpt: str
    description: list[str] = Field(default_factory=list)
    meta: list[MetaView] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    collaborators: list[str] = Field(default_factory=list)
    gallery: list[PublicGalleryView] = Field(default_factory=list)
    published_at: datetime | None = None


def _dimension(value: int | None) -> int | None:
    return value or None


def to_admin_project(project: Project, proxy_path: str = DEFAULT_PROXY_PATH) -> AdminProject:
    """Build the editor view of a project row."""
    hero = project.hero or {}
    return AdminProject(
        id=str(project.id),
        slug=project.slug,
        title=project.title,
        category=project.category_label,
        location=project.location,
        year=project.year_display,
        hero_image=resolve_media_url(hero.get("src", ""), proxy_path),
        hero_asset_id=hero.get("asset_id"),
        hero_caption=hero.get("caption", ""),
        excerpt=project.excerpt,
        description=[block["body"] for block in sort_by_order(project.description_blocks)],
        meta=[
            MetaView(label=item["label"], value=item["value"])
            for item in sort_by_order(project.meta)
        ],
        services=[item["label"] for item in sort_by_order(project.services)],
        collaborators=[item["label"] for item in sort_by_order(project.collaborators)],
        gallery=[
            AdminGalleryView(
                asset_id=item.get("asset_id"),
                src=resolve_media_url(item.get("src", ""), proxy_path),
                caption=item.get("caption", ""),
                width=_dimension(item.get("width")),
                height=_dimension(item.get("height")),
            )
            for item in sort_by_order(project.gallery)
        ],
        status=project.status,
        revision=project.revision,
        last_edited=project.updated_at,
        published_at=project.published_at,
    )


def to_public_project(
    snapshot: PublishedProject,
    proxy_path: str = DEFAULT_PROXY_PATH,
) -> PublicProject:
    """Build the reader view of a published snapshot."""
    hero = snapshot.hero or {}
    return PublicProject(
        id=str(snapshot.project_id),
        slug=snapshot.slug,
        title=snapshot.title,
        category=snapshot.category_label,
        location=snapshot.location,
        year=snapshot.year_display,
        hero_image=resolve_media_url(hero.get("src", ""), proxy_path),
        hero_caption=hero.get("caption", ""),
        excerpt=snapshot.excerpt,
        description=[block["body"] for block in sort_by_order(snapshot.description_blocks)],
        meta=[
            MetaView(label=item["label"], value=item["value"])
            for item in sort_by_order(snapshot.meta)
        ],
        services=[item["label"] for item in sort_by_order(snapshot.services)],
        collaborators=[item["label"] for item in sort_by_order(snapshot.collaborators)],
        gallery=[
            PublicGalleryView(
                image=resolve_media_url(item.get("src", ""), proxy_path),
                caption=item.get("caption", ""),
                width=_dimension(item.get("width")),
                height=_dimension(item.get("height")),
            )
            for item in sort_by_order(snapshot.gallery)
        ],
        published_at=snapshot.published_at,
    )
