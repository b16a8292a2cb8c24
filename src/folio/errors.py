"""Exception hierarchy for the Folio engine.

Validation and not-found errors are terminal: they abort the current
transaction and reach the caller unchanged. Transient store errors are
retried by the transaction coordinator and only surface as FatalStoreError
once the retry budget is spent. AssetCleanupError never leaves the garbage
collector.
"""

from __future__ import annotations

from enum import Enum


class FolioError(Exception):
    """Base class for all engine errors."""


class ProjectValidationError(FolioError):
    """Raised when a payload violates one or more content rules.

    Attributes:
        details: Every violated rule's message, in rule order.
    """

    def __init__(self, details: list[str]):
        self.details = list(details)
        super().__init__("; ".join(self.details))


class NotFoundError(FolioError):
    """Raised when a requested entity does not exist or is archived."""


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is absent or already archived.

    Attributes:
        project_id: The identifier that was looked up.
    """

    def __init__(self, project_id: object):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class UnsupportedMediaError(FolioError):
    """Raised for upload requests with a disallowed content type or kind."""


class TransientStoreError(FolioError):
    """A retryable conflict or timeout reported by the primary store."""


class FatalStoreError(FolioError):
    """A mutation that kept failing transiently until retries ran out.

    Attributes:
        attempts: Number of attempts made before giving up.
    """

    def __init__(self, message: str, attempts: int):
        self.attempts = attempts
        super().__init__(message)


class AssetCleanupError(FolioError):
    """Failure during the post-commit asset sweep. Logged, never raised to callers."""


class InvalidTransitionError(FolioError):
    """Raised when a mutation would move a project along a forbidden edge.

    Attributes:
        current: Status the project is in.
        target: Status the mutation asked for.
        project_id: The project that failed to transition.
    """

    def __init__(self, current: Enum, target: Enum, project_id: object = None):
        self.current = current
        self.target = target
        self.project_id = project_id
        msg = f"Invalid transition from {current.value} to {target.value}"
        if project_id:
            msg += f" for project {project_id}"
        super().__init__(msg)
