"""Pydantic schemas for editor payloads and embedded project records.

``ProjectPayload`` is what the editing UI submits on save, publish and
unpublish. Every field has a permissive default so that missing values are
reported by the content validator as rule violations, all at once, instead
of failing model parsing on the first one.

The ``*Item`` / ``HeroImage`` records are the tagged shapes stored in the
JSON sub-list columns of projects and published snapshots. Each ordered
record has a stable ``id`` and an ``order`` integer.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field


class MetaInput(BaseModel):
    """One label/value row as submitted by the editor."""

    label: str = ""
    value: str = ""


class GalleryInput(BaseModel):
    """One gallery image as submitted by the editor.

    Either ``asset_id`` (an existing MediaAsset) or ``src`` (a URL or
    storage key) identifies the image.
    """

    asset_id: str | None = None
    src: str = ""
    caption: str = ""
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)


class ProjectPayload(BaseModel):
    """Full editor form submitted on save, publish and unpublish."""

    slug: str = ""
    title: str = ""
    category: str = ""
    location: str = ""
    year: str = ""
    hero_image: str = ""
    hero_asset_id: str | None = None
    hero_caption: str = ""
    excerpt: str = ""
    description: list[str] = Field(default_factory=list)
    meta: list[MetaInput] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    collaborators: list[str] = Field(default_factory=list)
    gallery: list[GalleryInput] = Field(default_factory=list)


class HeroImage(BaseModel):
    """Hero record stored on projects and snapshots."""

    asset_id: str | None = None
    src: str = ""
    width: int = 0
    height: int = 0
    caption: str = ""


class DescriptionBlock(BaseModel):
    id: str
    body: str
    order: int


class MetaItem(BaseModel):
    id: str
    label: str
    value: str
    order: int


class ServiceItem(BaseModel):
    id: str
    service_id: str | None = None
    label: str
    order: int


class CollaboratorItem(BaseModel):
    id: str
    collaborator_id: str | None = None
    label: str
    order: int


class GalleryItem(BaseModel):
    id: str
    asset_id: str | None = None
    src: str = ""
    caption: str = ""
    width: int = 0
    height: int = 0
    order: int


def new_record_id() -> str:
    """Fresh identifier for an embedded record."""
    return str(uuid.uuid4())


def sort_by_order(items: Iterable[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Records sorted by their ``order`` field (missing order sorts first)."""
    return sorted(items or [], key=lambda item: item.get("order") or 0)


def resequence(
    items: Iterable[dict[str, Any]] | None,
    fresh_ids: bool = False,
) -> list[dict[str, Any]]:
    """Copy records in display order with ``order`` rewritten to 0..n-1.

    Args:
        items: Records to re-sequence.
        fresh_ids: Give every copied record a new ``id`` (used by duplicate).
    """
    sequenced = []
    for index, item in enumerate(sort_by_order(items)):
        record = dict(item)
        record["order"] = index
        if fresh_ids:
            record["id"] = new_record_id()
        sequenced.append(record)
    return sequenced


def dump_records(records: Iterable[BaseModel]) -> list[dict[str, Any]]:
    """Serialize records for a JSON column."""
    return [record.model_dump(mode="json") for record in records]
