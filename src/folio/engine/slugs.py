"""Slug allocation for projects.

Slugs are unique among non-deleted projects. The check runs inside the
mutation's transaction, and the partial unique index on ``projects.slug``
catches the remaining race: a concurrent commit of the same slug fails with
a unique violation, which the transaction coordinator retries so the next
attempt sees the winner's row and picks the next suffix.
"""

from __future__ import annotations

import time
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from folio.database.queries.project import slug_in_use
from folio.engine.validation import SLUG_MAX_LENGTH
from folio.text import slugify

logger = structlog.get_logger(__name__)


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    encoded = ""
    while value:
        value, remainder = divmod(value, 36)
        encoded = digits[remainder] + encoded
    return encoded


def timestamp_token() -> str:
    """Millisecond timestamp in base 36, used for placeholder slugs."""
    return _base36(int(time.time() * 1000))


def with_suffix(base: str, attempt: int) -> str:
    """``base-<attempt>``, trimming ``base`` so the result fits the slug limit."""
    suffix = f"-{attempt}"
    trimmed = base[: SLUG_MAX_LENGTH - len(suffix)].rstrip("-")
    return f"{trimmed}{suffix}"


async def allocate_slug(
    session: AsyncSession,
    desired: str,
    ignore_id: UUID | None = None,
) -> str:
    """Produce a free slug derived from ``desired``.

    Args:
        session: Session of the running mutation transaction.
        desired: Human-readable source text or requested slug.
        ignore_id: Project that may keep its current slug.

    Returns:
        ``desired`` normalized, or with the first free ``-N`` suffix.
    """
    base = slugify(desired, SLUG_MAX_LENGTH)
    if not base:
        base = f"project-{timestamp_token()}"

    candidate = base
    attempt = 1
    while await slug_in_use(session, candidate, ignore_id=ignore_id):
        candidate = with_suffix(base, attempt)
        attempt += 1

    if candidate != base:
        logger.debug("slug_suffixed", requested=desired, allocated=candidate)
    return candidate
