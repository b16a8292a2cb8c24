"""Content rules for project payloads.

Two strictness levels share one rule set. Loose validation guards draft
saves; strict validation guards publishing and additionally requires the
hero image and a complete gallery. Every violated rule is collected and the
whole list is raised at once as a ProjectValidationError.
"""

from __future__ import annotations

import re

from folio.engine.documents import ProjectPayload
from folio.errors import ProjectValidationError

TITLE_MAX_LENGTH = 120
SLUG_MAX_LENGTH = 60
HERO_CAPTION_MAX_LENGTH = 140
EXCERPT_MAX_LENGTH = 360
MIN_DESCRIPTION_PARAGRAPHS = 2
MIN_PARAGRAPH_LENGTH = 80
MIN_META_ROWS = 3
MIN_GALLERY_ITEMS = 3
MAX_GALLERY_ITEMS = 15

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
YEAR_PATTERN = re.compile(r"^(19|20|21)\d{2}(-\d{2})?$")


def collect_violations(payload: ProjectPayload, strict: bool) -> list[str]:
    """Return the message of every rule ``payload`` breaks, in rule order.

    Args:
        payload: Editor form payload.
        strict: Apply publish-time rules (hero and gallery completeness).
    """
    errors: list[str] = []

    title = payload.title.strip()
    if not title:
        errors.append("Title is required")
    elif len(payload.title) > TITLE_MAX_LENGTH:
        errors.append(f"Title max length is {TITLE_MAX_LENGTH} characters")

    if not payload.slug.strip():
        errors.append("Slug is required")
    elif not SLUG_PATTERN.match(payload.slug):
        errors.append("Slug must use lowercase letters, numbers, and hyphen")
    elif len(payload.slug) > SLUG_MAX_LENGTH:
        errors.append(f"Slug max length is {SLUG_MAX_LENGTH} characters")

    if not payload.category.strip():
        errors.append("Category is required")

    if not payload.location.strip():
        errors.append("Location is required")

    year = payload.year.strip()
    if not year:
        errors.append("Year is required")
    elif not YEAR_PATTERN.match(year):
        errors.append("Year must match YYYY or YYYY-YY")

    has_hero = bool(payload.hero_image.strip() or payload.hero_asset_id)
    if strict and not has_hero:
        errors.append("Hero image required")

    if strict and not payload.hero_caption.strip():
        errors.append("Hero caption is required")
    elif len(payload.hero_caption) > HERO_CAPTION_MAX_LENGTH:
        errors.append(f"Hero caption max length is {HERO_CAPTION_MAX_LENGTH} characters")

    if not payload.excerpt.strip():
        errors.append("Excerpt is required")
    elif len(payload.excerpt) > EXCERPT_MAX_LENGTH:
        errors.append(f"Excerpt max length is {EXCERPT_MAX_LENGTH} characters")

    if len(payload.description) < MIN_DESCRIPTION_PARAGRAPHS:
        errors.append("Provide at least two description paragraphs")
    elif any(len(paragraph.strip()) < MIN_PARAGRAPH_LENGTH for paragraph in payload.description):
        errors.append(
            f"Each description paragraph must be at least {MIN_PARAGRAPH_LENGTH} characters"
        )

    if len(payload.meta) < MIN_META_ROWS:
        errors.append("Meta list requires at least three items")
    else:
        labels = [item.label.strip().lower() for item in payload.meta]
        non_empty = [label for label in labels if label]
        if len(set(non_empty)) != len(non_empty):
            errors.append("Meta labels must be unique")
        if any(not item.label.strip() or not item.value.strip() for item in payload.meta):
            errors.append("Meta items require label and value")

    if not [label for label in payload.services if label.strip()]:
        errors.append("Include at least one service")

    if not [label for label in payload.collaborators if label.strip()]:
        errors.append("Include at least one collaborator")

    gallery_size = len(payload.gallery)
    if gallery_size > MAX_GALLERY_ITEMS:
        errors.append("Gallery can include up to fifteen images")
    elif strict:
        if gallery_size < MIN_GALLERY_ITEMS:
            errors.append("Gallery requires at least three images")
        elif any(
            not (item.src.strip() or item.asset_id) or not item.caption.strip()
            for item in payload.gallery
        ):
            errors.append("Gallery entries require image URL and caption")

    return errors


def validate_payload(payload: ProjectPayload, strict: bool) -> None:
    """Raise ProjectValidationError listing every violated rule.

    Args:
        payload: Editor form payload.
        strict: Apply publish-time rules.

    Raises:
        ProjectValidationError: If any rule is violated.
    """
    errors = collect_violations(payload, strict)
    if errors:
        raise ProjectValidationError(errors)
