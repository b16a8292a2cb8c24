"""Project publishing engine.

ProjectPublisher is the single entry point for draft mutations. Each
mutation runs as one closure under the TransactionCoordinator and performs,
in order: load the project, validate the payload, resolve lookup
references, allocate the slug, bind media assets, write the project, upsert
or remove the snapshot, append the version row, append the history entry.
Assets the project stopped referencing are handed to the garbage collector
only after the transaction commits.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import LiveSavePolicy
from folio.database.models.base import utcnow
from folio.database.models.history import HistoryAction, VersionSource
from folio.database.models.media import MediaKind
from folio.database.models.project import Project, ProjectStatus
from folio.database.queries.lookup import ensure_category, ensure_collaborator, ensure_service
from folio.database.queries.project import get_live_project, list_live_projects
from folio.engine.assets import bind_asset, project_asset_ids, removed_asset_ids
from folio.engine.documents import (
    CollaboratorItem,
    DescriptionBlock,
    GalleryItem,
    HeroImage,
    MetaInput,
    MetaItem,
    ProjectPayload,
    ServiceItem,
    dump_records,
    new_record_id,
    resequence,
)
from folio.engine.gc import AssetGarbageCollector
from folio.engine.history import record_history, record_version
from folio.engine.media_urls import DEFAULT_PROXY_PATH
from folio.engine.slugs import allocate_slug, timestamp_token
from folio.engine.snapshot import remove_snapshot, upsert_snapshot
from folio.engine.state_machine import require_transition
from folio.engine.transactions import TransactionCoordinator
from folio.engine.validation import validate_payload
from folio.engine.views import AdminProject, to_admin_project
from folio.errors import ProjectNotFoundError, ProjectValidationError
from folio.logging import project_context
from folio.text import normalize_title, tokenize, unique_strings

logger = structlog.get_logger(__name__)

PLACEHOLDER_TITLE = "Untitled project"
PLACEHOLDER_CATEGORY = "Unassigned"
PLACEHOLDER_LOCATION = "City, Country"
PLACEHOLDER_HERO_CAPTION = "Pending hero caption"
PLACEHOLDER_EXCERPT = (
    "Use this space to summarize the commission in a single sentence before "
    "replacing this placeholder copy."
)
PLACEHOLDER_PARAGRAPH = (
    "Begin the narrative by outlining the project intent, material palette, and "
    "experiential goals. Replace this placeholder with at least eighty characters "
    "describing the spatial approach."
)
PLACEHOLDER_SERVICE = "Architecture"
PLACEHOLDER_COLLABORATOR = "Studio Partner — TBD"

COPY_TITLE_SUFFIX = " (Copy)"
COPY_SLUG_SUFFIX = "-copy"


def placeholder_payload(slug: str, year: str | None = None) -> ProjectPayload:
    """Form content a freshly created draft starts with."""
    year = year or str(utcnow().year)
    return ProjectPayload(
        slug=slug,
        title=PLACEHOLDER_TITLE,
        category=PLACEHOLDER_CATEGORY,
        location=PLACEHOLDER_LOCATION,
        year=year,
        hero_caption=PLACEHOLDER_HERO_CAPTION,
        excerpt=PLACEHOLDER_EXCERPT,
        description=[PLACEHOLDER_PARAGRAPH, PLACEHOLDER_PARAGRAPH],
        meta=[
            MetaInput(label="Location", value=PLACEHOLDER_LOCATION),
            MetaInput(label="Year", value=year),
            MetaInput(label="Scope", value="Project scope"),
        ],
        services=[PLACEHOLDER_SERVICE],
        collaborators=[PLACEHOLDER_COLLABORATOR],
    )


def build_search_tokens(payload: ProjectPayload) -> list[str]:
    """Distinct lowercase tokens for free-text search over a project."""
    tokens: list[str] = []
    for value in (payload.title, payload.category, payload.location, payload.year):
        tokens.extend(tokenize(value))
    for label in payload.services + payload.collaborators:
        tokens.extend(tokenize(label))
    for item in payload.meta:
        tokens.extend(tokenize(item.value))
    tokens.extend(tokenize(payload.excerpt))
    return unique_strings(tokens)


def _parse_project_id(project_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(project_id, uuid.UUID):
        return project_id
    try:
        return uuid.UUID(str(project_id))
    except ValueError:
        raise ProjectNotFoundError(project_id) from None


class ProjectPublisher:
    """Draft lifecycle operations: list, get, create, save, publish,
    unpublish, delete and duplicate.

    Attributes:
        coordinator: Runs every mutation in one retried transaction.
        collector: Receives post-commit asset cleanup candidates.
        system_actor: Principal for rows the engine creates on its own
            (lookup entities) and the default acting principal.
        live_save_policy: What save does to an already-published project.
        proxy_path: Media proxy path used in returned views.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        collector: AssetGarbageCollector,
        system_actor: str = "system",
        live_save_policy: LiveSavePolicy = LiveSavePolicy.refresh,
        proxy_path: str = DEFAULT_PROXY_PATH,
    ) -> None:
        self.coordinator = coordinator
        self.collector = collector
        self.system_actor = system_actor
        self.live_save_policy = live_save_policy
        self.proxy_path = proxy_path
        self.logger = logger.bind(component="ProjectPublisher")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_drafts(self) -> list[AdminProject]:
        """All non-deleted projects, most recently updated first."""
        async with self.coordinator.session_factory() as session:
            projects = await list_live_projects(session)
            return [to_admin_project(project, self.proxy_path) for project in projects]

    async def get_draft(self, project_id: uuid.UUID | str) -> AdminProject:
        """One non-deleted project.

        Raises:
            ProjectNotFoundError: If the project is absent or archived.
        """
        pid = _parse_project_id(project_id)
        async with self.coordinator.session_factory() as session:
            project = await get_live_project(session, pid)
            if project is None:
                raise ProjectNotFoundError(pid)
            return to_admin_project(project, self.proxy_path)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_draft(self, actor: str | None = None) -> AdminProject:
        """Create a placeholder draft at revision 1."""
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> AdminProject:
            slug = await allocate_slug(session, f"untitled-{timestamp_token()}")
            payload = placeholder_payload(slug)
            project = Project(
                id=uuid.uuid4(),
                status=ProjectStatus.draft,
                revision=1,
                created_by=actor,
            )
            await self._write_content(session, project, payload, slug, actor)
            session.add(project)
            await session.flush()

            await record_version(session, project, VersionSource.manual_save, actor)
            await record_history(
                session,
                project.id,
                HistoryAction.created,
                actor,
                to_status=ProjectStatus.draft,
                snapshot_version=project.revision,
            )
            return to_admin_project(project, self.proxy_path)

        view = await self.coordinator.run(mutation, name="create_draft")
        with project_context(view.id, actor):
            self.logger.info("project_created", slug=view.slug)
        return view

    async def save_draft(
        self,
        project_id: uuid.UUID | str,
        payload: ProjectPayload,
        actor: str | None = None,
    ) -> AdminProject:
        """Persist editor changes without changing the publishing state.

        Drafts are validated loosely. For a published project the
        ``live_save_policy`` decides: ``refresh`` validates strictly and
        refreshes the snapshot in the same transaction, ``defer`` validates
        loosely and leaves the snapshot until the next publish.

        Raises:
            ProjectValidationError: If the payload breaks a content rule.
            ProjectNotFoundError: If the project is absent or archived.
        """
        pid = _parse_project_id(project_id)
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> tuple[AdminProject, list[str]]:
            project = await self._load(session, pid)
            from_status = project.status
            refresh_live = (
                from_status == ProjectStatus.published
                and self.live_save_policy == LiveSavePolicy.refresh
            )
            validate_payload(payload, strict=refresh_live)
            require_transition(from_status, from_status, pid)

            before = project_asset_ids(project)
            slug = await allocate_slug(session, payload.slug, ignore_id=pid)
            await self._write_content(session, project, payload, slug, actor, strict=refresh_live)
            project.revision += 1
            await session.flush()

            if refresh_live:
                await upsert_snapshot(session, project)
            await record_version(
                session,
                project,
                VersionSource.manual_save,
                actor,
                published=refresh_live,
            )
            await record_history(
                session,
                project.id,
                HistoryAction.saved,
                actor,
                from_status=from_status,
                to_status=project.status,
                snapshot_version=project.revision,
            )
            removed = removed_asset_ids(before, project_asset_ids(project))
            return to_admin_project(project, self.proxy_path), removed

        with project_context(str(pid), actor):
            view, removed = await self.coordinator.run(mutation, name="save_draft")
            self.logger.info(
                "project_saved",
                revision=view.revision,
                status=view.status.value,
            )
            self.collector.schedule(removed)
        return view

    async def publish(
        self,
        project_id: uuid.UUID | str,
        payload: ProjectPayload,
        actor: str | None = None,
    ) -> AdminProject:
        """Validate strictly, mark published and refresh the public snapshot.

        Raises:
            ProjectValidationError: If the payload breaks a publish rule.
            ProjectNotFoundError: If the project is absent or archived.
        """
        pid = _parse_project_id(project_id)
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> tuple[AdminProject, list[str]]:
            project = await self._load(session, pid)
            from_status = project.status
            validate_payload(payload, strict=True)
            require_transition(from_status, ProjectStatus.published, pid)

            before = project_asset_ids(project)
            slug = await allocate_slug(session, payload.slug, ignore_id=pid)
            await self._write_content(session, project, payload, slug, actor, strict=True)
            project.status = ProjectStatus.published
            project.published_at = utcnow()
            project.published_by = actor
            project.revision += 1
            await session.flush()

            await upsert_snapshot(session, project)
            await record_version(
                session, project, VersionSource.publish, actor, published=True
            )
            await record_history(
                session,
                project.id,
                HistoryAction.published,
                actor,
                from_status=from_status,
                to_status=ProjectStatus.published,
                snapshot_version=project.revision,
            )
            removed = removed_asset_ids(before, project_asset_ids(project))
            return to_admin_project(project, self.proxy_path), removed

        with project_context(str(pid), actor):
            view, removed = await self.coordinator.run(mutation, name="publish")
            self.logger.info("project_published", revision=view.revision)
            self.collector.schedule(removed)
        return view

    async def unpublish(
        self,
        project_id: uuid.UUID | str,
        payload: ProjectPayload,
        actor: str | None = None,
    ) -> AdminProject:
        """Save the payload as a draft and take the snapshot offline.

        Raises:
            ProjectValidationError: If the payload breaks a content rule.
            ProjectNotFoundError: If the project is absent or archived.
        """
        pid = _parse_project_id(project_id)
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> tuple[AdminProject, list[str]]:
            project = await self._load(session, pid)
            from_status = project.status
            validate_payload(payload, strict=False)
            require_transition(from_status, ProjectStatus.draft, pid)

            before = project_asset_ids(project)
            slug = await allocate_slug(session, payload.slug, ignore_id=pid)
            await self._write_content(session, project, payload, slug, actor)
            project.status = ProjectStatus.draft
            project.revision += 1
            await session.flush()

            await remove_snapshot(session, project.id)
            await record_version(session, project, VersionSource.unpublish, actor)
            await record_history(
                session,
                project.id,
                HistoryAction.unpublished,
                actor,
                from_status=from_status,
                to_status=ProjectStatus.draft,
                snapshot_version=project.revision,
            )
            removed = removed_asset_ids(before, project_asset_ids(project))
            return to_admin_project(project, self.proxy_path), removed

        with project_context(str(pid), actor):
            view, removed = await self.coordinator.run(mutation, name="unpublish")
            self.logger.info("project_unpublished", revision=view.revision)
            self.collector.schedule(removed)
        return view

    async def delete_draft(
        self,
        project_id: uuid.UUID | str,
        actor: str | None = None,
    ) -> AdminProject:
        """Archive a project and take its snapshot offline.

        The row is kept. Every asset it referenced becomes a cleanup
        candidate; assets still used elsewhere survive the sweep.

        Raises:
            ProjectNotFoundError: If the project is absent or already archived.
        """
        pid = _parse_project_id(project_id)
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> tuple[AdminProject, list[str]]:
            project = await self._load(session, pid)
            from_status = project.status
            require_transition(from_status, ProjectStatus.archived, pid)

            candidates = sorted(project_asset_ids(project))
            project.status = ProjectStatus.archived
            project.deleted_at = utcnow()
            project.updated_by = actor
            await session.flush()

            await remove_snapshot(session, project.id)
            await record_history(
                session,
                project.id,
                HistoryAction.deleted,
                actor,
                from_status=from_status,
                to_status=ProjectStatus.archived,
            )
            return to_admin_project(project, self.proxy_path), candidates

        with project_context(str(pid), actor):
            view, candidates = await self.coordinator.run(mutation, name="delete_draft")
            self.logger.info("project_deleted")
            self.collector.schedule(candidates)
        return view

    async def duplicate(
        self,
        project_id: uuid.UUID | str,
        actor: str | None = None,
    ) -> AdminProject:
        """Copy a project into a new draft at revision 1.

        The copy gets ``<title> (Copy)``, a free slug derived from
        ``<slug>-copy``, fresh record IDs and no publish stamps.

        Raises:
            ProjectNotFoundError: If the source is absent or archived.
        """
        pid = _parse_project_id(project_id)
        actor = actor or self.system_actor

        async def mutation(session: AsyncSession) -> AdminProject:
            source = await self._load(session, pid)
            slug = await allocate_slug(session, f"{source.slug}{COPY_SLUG_SUFFIX}")
            title = f"{source.title}{COPY_TITLE_SUFFIX}"

            clone = Project(
                id=uuid.uuid4(),
                slug=slug,
                title=title,
                title_sort=normalize_title(title),
                category_id=source.category_id,
                category_label=source.category_label,
                location=source.location,
                year_display=source.year_display,
                status=ProjectStatus.draft,
                revision=1,
                hero=dict(source.hero) if source.hero else None,
                excerpt=source.excerpt,
                description_blocks=resequence(source.description_blocks, fresh_ids=True),
                meta=resequence(source.meta, fresh_ids=True),
                services=resequence(source.services, fresh_ids=True),
                collaborators=resequence(source.collaborators, fresh_ids=True),
                gallery=resequence(source.gallery, fresh_ids=True),
                search_tokens=list(source.search_tokens or []),
                created_by=actor,
                updated_by=actor,
            )
            session.add(clone)
            await session.flush()

            await record_version(session, clone, VersionSource.manual_save, actor)
            await record_history(
                session,
                clone.id,
                HistoryAction.duplicated,
                actor,
                from_status=ProjectStatus.draft,
                to_status=ProjectStatus.draft,
                snapshot_version=clone.revision,
                summary=f"Duplicated from {source.id}",
            )
            return to_admin_project(clone, self.proxy_path)

        view = await self.coordinator.run(mutation, name="duplicate")
        with project_context(view.id, actor):
            self.logger.info("project_duplicated", source_id=str(pid))
        return view

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, session: AsyncSession, project_id: uuid.UUID) -> Project:
        project = await get_live_project(session, project_id, for_update=True)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _write_content(
        self,
        session: AsyncSession,
        project: Project,
        payload: ProjectPayload,
        slug: str,
        actor: str,
        strict: bool = False,
    ) -> None:
        """Resolve references, bind assets and copy the payload onto ``project``.

        Every ordered list is rebuilt from the payload with ``order`` set to
        its position. With ``strict`` the hero and every gallery entry must
        bind to an asset; an asset ID naming no row does not count.

        Raises:
            ProjectValidationError: If ``strict`` and an image did not bind.
        """
        category = payload.category.strip()
        category_id = (
            await ensure_category(session, category, self.system_actor) if category else None
        )

        hero_asset = await bind_asset(
            session,
            payload.hero_asset_id,
            payload.hero_image,
            MediaKind.hero,
            actor,
        )
        hero = HeroImage(
            asset_id=str(hero_asset.id) if hero_asset else None,
            src=hero_asset.storage_key if hero_asset else payload.hero_image.strip(),
            width=hero_asset.width if hero_asset else 0,
            height=hero_asset.height if hero_asset else 0,
            caption=payload.hero_caption.strip(),
        )

        gallery: list[GalleryItem] = []
        for item in payload.gallery:
            asset = await bind_asset(
                session,
                item.asset_id,
                item.src,
                MediaKind.gallery,
                actor,
                width=item.width,
                height=item.height,
            )
            gallery.append(
                GalleryItem(
                    id=new_record_id(),
                    asset_id=str(asset.id) if asset else None,
                    src=asset.storage_key if asset else item.src.strip(),
                    caption=item.caption.strip(),
                    width=asset.width if asset else item.width or 0,
                    height=asset.height if asset else item.height or 0,
                    order=len(gallery),
                )
            )

        if strict:
            unbound: list[str] = []
            if hero_asset is None:
                unbound.append("Hero image required")
            if any(not item.src for item in gallery):
                unbound.append("Gallery entries require image URL and caption")
            if unbound:
                raise ProjectValidationError(unbound)

        services: list[ServiceItem] = []
        for label in (value.strip() for value in payload.services):
            if not label:
                continue
            service_id = await ensure_service(session, label, self.system_actor)
            services.append(
                ServiceItem(
                    id=new_record_id(),
                    service_id=str(service_id),
                    label=label,
                    order=len(services),
                )
            )

        collaborators: list[CollaboratorItem] = []
        for label in (value.strip() for value in payload.collaborators):
            if not label:
                continue
            collaborator_id = await ensure_collaborator(session, label, self.system_actor)
            collaborators.append(
                CollaboratorItem(
                    id=new_record_id(),
                    collaborator_id=str(collaborator_id),
                    label=label,
                    order=len(collaborators),
                )
            )

        description = [
            DescriptionBlock(id=new_record_id(), body=body.strip(), order=index)
            for index, body in enumerate(payload.description)
        ]
        meta = [
            MetaItem(
                id=new_record_id(),
                label=item.label.strip(),
                value=item.value.strip(),
                order=index,
            )
            for index, item in enumerate(payload.meta)
        ]

        title = payload.title.strip()
        project.slug = slug
        project.title = title
        project.title_sort = normalize_title(title)
        project.category_id = category_id
        project.category_label = category
        project.location = payload.location.strip()
        project.year_display = payload.year.strip()
        project.hero = hero.model_dump(mode="json")
        project.excerpt = payload.excerpt.strip()
        project.description_blocks = dump_records(description)
        project.meta = dump_records(meta)
        project.services = dump_records(services)
        project.collaborators = dump_records(collaborators)
        project.gallery = dump_records(gallery)
        project.search_tokens = build_search_tokens(payload)
        project.updated_by = actor
