"""Unit tests for the project lifecycle state machine.

Tests cover:
- VALID_TRANSITIONS covering every ProjectStatus
- Allowed and forbidden edges
- Archived as a terminal state
- InvalidTransitionError contents
"""

from __future__ import annotations

import uuid

import pytest

from folio.database.models.project import ProjectStatus
from folio.engine.state_machine import (
    VALID_TRANSITIONS,
    require_transition,
    validate_transition,
)
from folio.errors import InvalidTransitionError


class TestValidTransitions:
    """Test the VALID_TRANSITIONS mapping and validation."""

    def test_valid_transitions_definition(self):
        """Verify VALID_TRANSITIONS includes all ProjectStatus values."""
        assert set(VALID_TRANSITIONS) == set(ProjectStatus)

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            # Saves keep the current state
            (ProjectStatus.draft, ProjectStatus.draft, True),
            (ProjectStatus.published, ProjectStatus.published, True),
            # Publish, unpublish
            (ProjectStatus.draft, ProjectStatus.published, True),
            (ProjectStatus.published, ProjectStatus.draft, True),
            # Delete
            (ProjectStatus.draft, ProjectStatus.archived, True),
            (ProjectStatus.published, ProjectStatus.archived, True),
            # Archived is terminal
            (ProjectStatus.archived, ProjectStatus.draft, False),
            (ProjectStatus.archived, ProjectStatus.published, False),
            (ProjectStatus.archived, ProjectStatus.archived, False),
        ],
    )
    def test_validate_transition(self, current, target, expected):
        """Test each edge of the lifecycle."""
        assert validate_transition(current, target) is expected

    def test_archived_has_no_outgoing_edges(self):
        """Test that nothing leaves the archived state."""
        assert VALID_TRANSITIONS[ProjectStatus.archived] == set()


class TestRequireTransition:
    """Test require_transition error reporting."""

    def test_allowed_transition_returns_none(self):
        """Test that an allowed edge passes silently."""
        assert require_transition(ProjectStatus.draft, ProjectStatus.published) is None

    def test_forbidden_transition_raises(self):
        """Test the error carries both states and the project."""
        project_id = uuid.uuid4()

        with pytest.raises(InvalidTransitionError) as exc_info:
            require_transition(ProjectStatus.archived, ProjectStatus.published, project_id)

        error = exc_info.value
        assert error.current == ProjectStatus.archived
        assert error.target == ProjectStatus.published
        assert error.project_id == project_id
        assert str(error) == (
            f"Invalid transition from archived to published for project {project_id}"
        )

    def test_message_without_project(self):
        """Test the message when no project ID is given."""
        with pytest.raises(InvalidTransitionError, match=r"^Invalid transition from archived to draft$"):
            require_transition(ProjectStatus.archived, ProjectStatus.draft)
