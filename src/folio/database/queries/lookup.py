"""Reference resolution for lookup entities ("ensure" pattern).

Each ``ensure_*`` function finds a lookup row by its normalized identity
and creates it when absent, attributed to the explicit ``actor``. Calling
one twice with the same label returns the same row.

Concurrent first-use of the same label by two transactions surfaces as a
unique-constraint violation at commit; the transaction coordinator retries
it and the second attempt finds the row created by the winner.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.models.lookup import Category, Collaborator, Service
from folio.text import slugify

logger = structlog.get_logger(__name__)

COLLABORATOR_DELIMITER = "—"


def parse_collaborator_label(label: str) -> tuple[str, str]:
    """Split ``"Name — Organization"`` into its parts.

    Best effort: a label without the delimiter yields an empty organization,
    and extra delimiters beyond the first are ignored.

    Returns:
        Tuple of (display_name, organization).
    """
    parts = [part.strip() for part in label.split(COLLABORATOR_DELIMITER)]
    display_name = parts[0]
    organization = parts[1] if len(parts) > 1 else ""
    return display_name, organization


async def ensure_category(session: AsyncSession, label: str, actor: str) -> UUID:
    """Return the ID of the category for ``label``, creating it if needed."""
    cleaned = label.strip()
    slug = slugify(cleaned, 60)
    result = await session.execute(select(Category.id).where(Category.slug == slug))
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing

    category = Category(
        name=cleaned,
        slug=slug,
        sort_order=0,
        description=f"{cleaned} (auto-generated)",
        created_by=actor,
    )
    session.add(category)
    await session.flush()
    logger.info("category_created", category_id=str(category.id), slug=slug)
    return category.id


async def ensure_service(session: AsyncSession, label: str, actor: str) -> UUID:
    """Return the ID of the service for ``label``, creating it if needed."""
    cleaned = label.strip()
    slug = slugify(cleaned, 80)
    result = await session.execute(select(Service.id).where(Service.slug == slug))
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing

    service = Service(
        label=cleaned,
        slug=slug,
        description=f"{cleaned} (auto-generated)",
        created_by=actor,
    )
    session.add(service)
    await session.flush()
    logger.info("service_created", service_id=str(service.id), slug=slug)
    return service.id


async def ensure_collaborator(session: AsyncSession, label: str, actor: str) -> UUID:
    """Return the ID of the collaborator for ``label``, creating it if needed."""
    display_name, organization = parse_collaborator_label(label)
    result = await session.execute(
        select(Collaborator.id).where(
            Collaborator.display_name == display_name,
            Collaborator.organization == organization,
        )
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing

    collaborator = Collaborator(
        display_name=display_name,
        organization=organization,
        role_default="",
        created_by=actor,
    )
    session.add(collaborator)
    await session.flush()
    logger.info(
        "collaborator_created",
        collaborator_id=str(collaborator.id),
        display_name=display_name,
        organization=organization,
    )
    return collaborator.id
