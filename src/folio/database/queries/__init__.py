"""Database query functions for Folio.

This module provides async query functions for all database entities:
- Project lookup and slug checks
- Published snapshot reads
- Media asset lookup and reference scanning
- Lookup entity resolution (categories, services, collaborators)

None of these functions commit; transactions belong to the caller.
"""

from folio.database.queries.lookup import (
    ensure_category,
    ensure_collaborator,
    ensure_service,
    parse_collaborator_label,
)
from folio.database.queries.media import (
    collect_asset_ids,
    delete_assets,
    find_asset_by_public_url,
    find_asset_by_storage_key,
    get_asset,
    get_assets,
    referenced_asset_ids,
)
from folio.database.queries.project import (
    get_live_project,
    list_live_projects,
    slug_in_use,
)
from folio.database.queries.published import (
    delete_published_for_project,
    get_published_by_slug,
    get_published_for_project,
    list_published,
    list_published_slugs,
)

__all__ = [
    # Project queries
    "get_live_project",
    "list_live_projects",
    "slug_in_use",
    # Snapshot queries
    "get_published_for_project",
    "get_published_by_slug",
    "list_published",
    "list_published_slugs",
    "delete_published_for_project",
    # Media queries
    "get_asset",
    "get_assets",
    "find_asset_by_public_url",
    "find_asset_by_storage_key",
    "delete_assets",
    "referenced_asset_ids",
    "collect_asset_ids",
    # Lookup resolution
    "ensure_category",
    "ensure_service",
    "ensure_collaborator",
    "parse_collaborator_label",
]
