"""Asset binding: map submitted image references to MediaAsset rows.

The editor may submit either an existing asset ID or a raw URL / storage
key. Both resolve to one canonical MediaAsset, created on demand, so
content binding treats them identically.
"""

from __future__ import annotations

import re
import uuid
from typing import Any
from urllib.parse import urlparse

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.media import MediaAsset, MediaKind
from folio.database.queries.media import (
    collect_asset_ids,
    find_asset_by_public_url,
    find_asset_by_storage_key,
    get_asset,
)
from folio.engine.media_urls import key_from_proxy_url

logger = structlog.get_logger(__name__)

# Dimensions recorded for assets first seen as bare URLs
DEFAULT_DIMENSIONS: dict[MediaKind, tuple[int, int]] = {
    MediaKind.hero: (3200, 2400),
    MediaKind.gallery: (2400, 1600),
}

_EXTENSION = re.compile(r"\.([a-z0-9]+)(?:\?|$)", re.IGNORECASE)


def format_from_url(url: str) -> str:
    """File extension of ``url`` in lowercase, ``jpg`` when there is none."""
    match = _EXTENSION.search(url)
    return match.group(1).lower() if match else "jpg"


def derive_storage_key(url: str) -> str:
    """Object key for ``url``: its path without the leading slash.

    Falls back to the host for URLs without a path, and to the raw value
    when it is not a URL at all (it is then already a key).
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url
    path = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
    return path or parsed.netloc


def _parse_uuid(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


async def bind_asset(
    session: AsyncSession,
    asset_id: str | None,
    url: str,
    kind: MediaKind,
    actor: str,
    width: int | None = None,
    height: int | None = None,
) -> MediaAsset | None:
    """Resolve an asset reference to a MediaAsset, creating one if needed.

    Resolution order: existing asset by ID, then by public URL, then by
    derived storage key, then a new row.

    Args:
        session: Session of the running mutation transaction.
        asset_id: Client-submitted asset ID, if any.
        url: Client-submitted URL or storage key.
        kind: hero or gallery.
        actor: Principal recorded on a newly created row.
        width: Known pixel width, if any.
        height: Known pixel height, if any.

    Returns:
        The bound MediaAsset, or None when neither an ID nor a URL was given.
    """
    parsed_id = _parse_uuid(asset_id)
    if parsed_id is not None:
        existing = await get_asset(session, parsed_id)
        if existing is not None:
            return existing

    cleaned = (url or "").strip()
    if not cleaned:
        return None
    # Admin views hand out proxy URLs; bind those by the key they carry
    cleaned = key_from_proxy_url(cleaned) or cleaned

    existing = await find_asset_by_public_url(session, cleaned)
    if existing is not None:
        return existing

    storage_key = derive_storage_key(cleaned)
    existing = await find_asset_by_storage_key(session, storage_key)
    if existing is not None:
        return existing

    default_width, default_height = DEFAULT_DIMENSIONS[kind]
    asset = MediaAsset(
        storage_key=storage_key,
        public_url=cleaned,
        kind=kind,
        width=width or default_width,
        height=height or default_height,
        format=format_from_url(cleaned),
        file_size_bytes=0,
        created_by=actor,
    )
    session.add(asset)
    await session.flush()
    logger.info(
        "media_asset_bound",
        asset_id=str(asset.id),
        storage_key=storage_key,
        kind=kind.value,
    )
    return asset


def project_asset_ids(document: Any) -> set[str]:
    """Asset IDs referenced by a project or snapshot row (hero and gallery)."""
    if document is None:
        return set()
    return collect_asset_ids(document.hero, document.gallery)


def removed_asset_ids(before: set[str], after: set[str]) -> list[str]:
    """Assets referenced before a mutation but not after it, sorted."""
    return sorted(before - after)
