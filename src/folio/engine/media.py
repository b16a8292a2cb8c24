"""Upload slots and upload commits for project media.

An upload is two calls: ``create_upload_slot`` hands the editor a storage
key and a presigned PUT URL, the browser uploads directly to the blob
store, and ``commit_upload`` records the finished object as a MediaAsset.
"""

from __future__ import annotations

import re
import uuid

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.media import MediaAsset, MediaKind
from folio.database.queries.media import find_asset_by_storage_key
from folio.engine.transactions import TransactionCoordinator
from folio.errors import UnsupportedMediaError
from folio.storage.base import BlobStore

logger = structlog.get_logger(__name__)

CONTENT_TYPE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/avif": "avif",
}

UNASSIGNED_SEGMENT = "unassigned"
SLUG_SEGMENT_MAX_LENGTH = 80

_UNSAFE_SEGMENT = re.compile(r"[^a-z0-9\-_]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


class UploadSlot(BaseModel):
    """Where and how to upload one object."""

    key: str
    upload_url: str
    public_url: str


class CommittedAsset(BaseModel):
    """MediaAsset recorded for a finished upload."""

    asset_id: str
    public_url: str
    storage_key: str
    width: int
    height: int


def sanitize_segment(value: str, max_length: int = SLUG_SEGMENT_MAX_LENGTH) -> str:
    """Lowercase path segment of ``[a-z0-9-_]`` characters."""
    cleaned = _UNSAFE_SEGMENT.sub("-", value.lower())
    cleaned = _REPEATED_HYPHENS.sub("-", cleaned).strip("-")
    return cleaned[:max_length]


def build_storage_key(
    project_id: uuid.UUID,
    project_slug: str | None,
    kind: MediaKind,
    extension: str,
) -> str:
    """``projects/<id>/<slug segment>/<kind>/<uuid>.<ext>``."""
    segment = sanitize_segment(project_slug) if project_slug else ""
    return (
        f"projects/{project_id}/{segment or UNASSIGNED_SEGMENT}/"
        f"{kind.value}/{uuid.uuid4()}.{extension}"
    )


def _check_kind(kind: MediaKind | str) -> MediaKind:
    try:
        return MediaKind(kind)
    except ValueError:
        raise UnsupportedMediaError(f"Unsupported media kind: {kind}") from None


def _check_content_type(content_type: str) -> str:
    extension = CONTENT_TYPE_EXTENSIONS.get(content_type)
    if extension is None:
        raise UnsupportedMediaError(f"Unsupported content type: {content_type}")
    return extension


def _check_project_id(project_id: uuid.UUID | str) -> uuid.UUID:
    try:
        return uuid.UUID(str(project_id))
    except ValueError:
        raise UnsupportedMediaError(f"Invalid project id: {project_id}") from None


class MediaService:
    """Issues upload slots and records committed uploads.

    Attributes:
        coordinator: Runs the commit transaction.
        blob_store: Signs upload URLs and maps keys to public URLs.
        upload_url_expiry: Lifetime of presigned URLs in seconds.
        actor: Principal recorded on committed assets.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        blob_store: BlobStore,
        upload_url_expiry: int = 300,
        actor: str = "system",
    ) -> None:
        self.coordinator = coordinator
        self.blob_store = blob_store
        self.upload_url_expiry = upload_url_expiry
        self.actor = actor

    async def create_upload_slot(
        self,
        project_id: uuid.UUID | str,
        content_type: str,
        kind: MediaKind | str,
        file_name: str | None = None,
        project_slug: str | None = None,
    ) -> UploadSlot:
        """Allocate a storage key and a time-limited upload URL for it.

        Args:
            project_id: Project the image is for.
            content_type: MIME type; jpeg, png, webp or avif.
            kind: ``hero`` or ``gallery``.
            file_name: Original file name, logged only.
            project_slug: Used for a readable key segment when known.

        Raises:
            UnsupportedMediaError: For a disallowed type, kind or project id.
        """
        media_kind = _check_kind(kind)
        extension = _check_content_type(content_type)
        project_uuid = _check_project_id(project_id)

        key = build_storage_key(project_uuid, project_slug, media_kind, extension)
        upload_url = await self.blob_store.sign_put_url(
            key, content_type, self.upload_url_expiry
        )
        logger.info(
            "upload_slot_created",
            project_id=str(project_uuid),
            key=key,
            kind=media_kind.value,
            file_name=file_name,
        )
        return UploadSlot(
            key=key,
            upload_url=upload_url,
            public_url=self.blob_store.public_url_for_key(key),
        )

    async def commit_upload(
        self,
        project_id: uuid.UUID | str,
        key: str,
        public_url: str,
        kind: MediaKind | str,
        width: int,
        height: int,
        content_type: str,
        file_size: int | None = None,
    ) -> CommittedAsset:
        """Record an uploaded object, updating the row if the key is known.

        A previously soft-deleted row for the same key is revived.

        Raises:
            UnsupportedMediaError: For a disallowed type, kind or project id.
        """
        media_kind = _check_kind(kind)
        extension = _check_content_type(content_type)
        project_uuid = _check_project_id(project_id)

        async def upsert(session: AsyncSession) -> CommittedAsset:
            asset = await find_asset_by_storage_key(session, key)
            if asset is None:
                asset = MediaAsset(storage_key=key, created_by=self.actor)
                session.add(asset)
            asset.public_url = public_url
            asset.kind = media_kind
            asset.width = width
            asset.height = height
            asset.format = extension
            asset.file_size_bytes = file_size or 0
            asset.project_id = project_uuid
            asset.deleted_at = None
            await session.flush()
            return CommittedAsset(
                asset_id=str(asset.id),
                public_url=asset.public_url,
                storage_key=asset.storage_key,
                width=asset.width,
                height=asset.height,
            )

        committed = await self.coordinator.run(upsert, name="commit_upload")
        logger.info(
            "upload_committed",
            project_id=str(project_uuid),
            asset_id=committed.asset_id,
            storage_key=key,
        )
        return committed
