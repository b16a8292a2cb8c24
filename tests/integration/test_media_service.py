"""Integration tests for upload slots and upload commits.

Tests cover:
- Storage key layout and presigned URL issuance
- Content type, kind and project ID checks
- Upsert-by-key semantics of commit_upload
"""

from __future__ import annotations

import re
import uuid

import pytest
from sqlalchemy import select, update

from folio.database.models.base import utcnow
from folio.database.models.media import MediaAsset, MediaKind
from folio.errors import UnsupportedMediaError

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


class TestCreateUploadSlot:
    """Tests for MediaService.create_upload_slot."""

    @pytest.mark.asyncio
    async def test_slot_key_layout(self, media_service):
        """Test the projects/<id>/<slug>/<kind>/<uuid>.<ext> layout."""
        project_id = uuid.uuid4()

        slot = await media_service.create_upload_slot(
            project_id, "image/jpeg", "hero", file_name="IMG_0001.JPG", project_slug="lantern-house"
        )

        assert re.fullmatch(
            rf"projects/{project_id}/lantern-house/hero/{UUID_PATTERN}\.jpg", slot.key
        )
        assert slot.upload_url == f"https://uploads.test/{slot.key}?expires=300"
        assert slot.public_url == f"https://pub-test.r2.dev/{slot.key}"

    @pytest.mark.asyncio
    async def test_slot_without_slug_is_unassigned(self, media_service):
        """Test that a missing slug falls back to the unassigned segment."""
        project_id = uuid.uuid4()

        slot = await media_service.create_upload_slot(str(project_id), "image/avif", "gallery")

        assert slot.key.startswith(f"projects/{project_id}/unassigned/gallery/")
        assert slot.key.endswith(".avif")

    @pytest.mark.asyncio
    async def test_slot_sanitizes_slug(self, media_service):
        """Test that the slug segment is reduced to safe characters."""
        slot = await media_service.create_upload_slot(
            uuid.uuid4(), "image/png", "gallery", project_slug="Lantern House / 2024!"
        )

        assert "/lantern-house-2024/gallery/" in slot.key

    @pytest.mark.asyncio
    async def test_keys_are_unique(self, media_service):
        """Test that two slots for the same project never share a key."""
        project_id = uuid.uuid4()
        first = await media_service.create_upload_slot(project_id, "image/png", "gallery")
        second = await media_service.create_upload_slot(project_id, "image/png", "gallery")

        assert first.key != second.key

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content_type", ["image/gif", "image/svg+xml", "application/pdf", ""])
    async def test_unsupported_content_type(self, media_service, content_type):
        """Test that types outside the allow-list are rejected."""
        with pytest.raises(UnsupportedMediaError, match="Unsupported content type"):
            await media_service.create_upload_slot(uuid.uuid4(), content_type, "hero")

    @pytest.mark.asyncio
    async def test_unsupported_kind(self, media_service):
        """Test that kinds other than hero and gallery are rejected."""
        with pytest.raises(UnsupportedMediaError, match="Unsupported media kind"):
            await media_service.create_upload_slot(uuid.uuid4(), "image/png", "banner")

    @pytest.mark.asyncio
    async def test_invalid_project_id(self, media_service):
        """Test that a malformed project ID is rejected."""
        with pytest.raises(UnsupportedMediaError, match="Invalid project id"):
            await media_service.create_upload_slot("project-1", "image/png", "hero")


class TestCommitUpload:
    """Tests for MediaService.commit_upload."""

    @pytest.mark.asyncio
    async def test_commit_creates_asset(self, media_service, session_factory):
        """Test that a finished upload is recorded with its metadata."""
        project_id = uuid.uuid4()
        slot = await media_service.create_upload_slot(project_id, "image/webp", "gallery")

        committed = await media_service.commit_upload(
            project_id, slot.key, slot.public_url, "gallery", 2400, 1600, "image/webp", 204_800
        )

        assert committed.storage_key == slot.key
        assert committed.public_url == slot.public_url
        assert (committed.width, committed.height) == (2400, 1600)

        async with session_factory() as session:
            asset = (
                await session.execute(
                    select(MediaAsset).where(MediaAsset.id == uuid.UUID(committed.asset_id))
                )
            ).scalar_one()
        assert asset.kind == MediaKind.gallery
        assert asset.format == "webp"
        assert asset.file_size_bytes == 204_800
        assert asset.project_id == project_id
        assert asset.created_by == "system"

    @pytest.mark.asyncio
    async def test_commit_same_key_updates_row(self, media_service):
        """Test that re-committing a key updates the existing asset."""
        project_id = uuid.uuid4()
        slot = await media_service.create_upload_slot(project_id, "image/jpeg", "hero")

        first = await media_service.commit_upload(
            project_id, slot.key, slot.public_url, "hero", 1000, 800, "image/jpeg"
        )
        second = await media_service.commit_upload(
            project_id, slot.key, slot.public_url, "hero", 3200, 2400, "image/jpeg"
        )

        assert second.asset_id == first.asset_id
        assert (second.width, second.height) == (3200, 2400)

    @pytest.mark.asyncio
    async def test_commit_revives_soft_deleted_row(self, media_service, session_factory):
        """Test that committing a soft-deleted key clears deleted_at."""
        project_id = uuid.uuid4()
        slot = await media_service.create_upload_slot(project_id, "image/png", "gallery")
        committed = await media_service.commit_upload(
            project_id, slot.key, slot.public_url, "gallery", 800, 600, "image/png"
        )

        async with session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(MediaAsset)
                    .where(MediaAsset.storage_key == slot.key)
                    .values(deleted_at=utcnow())
                )

        await media_service.commit_upload(
            project_id, slot.key, slot.public_url, "gallery", 800, 600, "image/png"
        )

        async with session_factory() as session:
            asset = (
                await session.execute(
                    select(MediaAsset).where(MediaAsset.id == uuid.UUID(committed.asset_id))
                )
            ).scalar_one()
        assert asset.deleted_at is None

    @pytest.mark.asyncio
    async def test_commit_rejects_bad_type(self, media_service):
        """Test that commit applies the same content type allow-list."""
        with pytest.raises(UnsupportedMediaError):
            await media_service.commit_upload(
                uuid.uuid4(), "projects/x/a.gif", "https://pub-test.r2.dev/a.gif",
                "gallery", 10, 10, "image/gif",
            )
