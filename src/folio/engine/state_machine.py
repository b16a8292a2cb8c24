"""Publishing lifecycle transitions.

Saves keep a project in its current live state, publish and unpublish move
it between draft and published, and delete archives it for good.
"""

from __future__ import annotations

from folio.database.models.project import ProjectStatus
from folio.errors import InvalidTransitionError

# Authoritative state machine definition
VALID_TRANSITIONS: dict[ProjectStatus, set[ProjectStatus]] = {
    ProjectStatus.draft: {ProjectStatus.draft, ProjectStatus.published, ProjectStatus.archived},
    ProjectStatus.published: {
        ProjectStatus.published,
        ProjectStatus.draft,
        ProjectStatus.archived,
    },
    ProjectStatus.archived: set(),  # Terminal state - no transitions allowed
}


def validate_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    """Return True if ``current -> target`` is an allowed edge."""
    return target in VALID_TRANSITIONS.get(current, set())


def require_transition(
    current: ProjectStatus,
    target: ProjectStatus,
    project_id: object = None,
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if not validate_transition(current, target):
        raise InvalidTransitionError(current, target, project_id)
