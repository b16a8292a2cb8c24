"""Transaction coordinator for engine mutations.

Every mutation (create, save, publish, unpublish, delete, duplicate, upload
commit) runs as one closure inside one database transaction. Transient store
failures abort the attempt and are retried with exponential backoff; any
other error aborts immediately and propagates unchanged.

Retry classification lives in a single predicate, ``is_retryable``, and the
backoff schedule in a frozen ``RetryPolicy``, so either can be swapped per
coordinator without touching the engine.

Example:
    >>> coordinator = TransactionCoordinator(session_factory, RetryPolicy(max_attempts=3))
    >>> project = await coordinator.run(lambda session: do_work(session), name="save")
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.config import TransactionConfig
from folio.errors import FatalStoreError, FolioError, TransientStoreError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03"})
UNIQUE_VIOLATION_SQLSTATE = "23505"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff.

    Attributes:
        max_attempts: Total attempts, the first one included.
        base_delay: Delay in seconds before the second attempt; doubles after.
    """

    max_attempts: int = 3
    base_delay: float = 0.1

    def delay_for(self, attempt: int) -> float:
        """Backoff after the zero-based ``attempt`` failed."""
        return self.base_delay * (2**attempt)

    @classmethod
    def from_config(cls, config: TransactionConfig) -> RetryPolicy:
        return cls(max_attempts=config.max_attempts, base_delay=config.base_delay_seconds)


def _sqlstate(error: sa_exc.DBAPIError) -> str | None:
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed attempt may be retried.

    Retryable:
        - TransientStoreError raised by engine code
        - attempt timeouts and connection-pool timeouts
        - invalidated connections
        - PostgreSQL serialization failures, deadlocks, lock timeouts
        - SQLite "database is locked" / "database is busy"
        - unique violations, which are lost races on slugs, lookup rows or
          version numbers; the next attempt re-reads and resolves them

    Engine domain errors (validation, not found, ...) are never retryable.
    """
    if isinstance(error, FolioError):
        return isinstance(error, TransientStoreError)
    if isinstance(error, (asyncio.TimeoutError, sa_exc.TimeoutError)):
        return True
    if not isinstance(error, sa_exc.DBAPIError):
        return False
    if error.connection_invalidated:
        return True

    state = _sqlstate(error)
    if state in RETRYABLE_SQLSTATES:
        return True
    message = str(error.orig).lower()
    if isinstance(error, sa_exc.IntegrityError):
        return state == UNIQUE_VIOLATION_SQLSTATE or "unique constraint failed" in message
    if isinstance(error, sa_exc.OperationalError):
        return "database is locked" in message or "database is busy" in message
    return False


class TransactionCoordinator:
    """Runs mutation closures atomically with bounded retry.

    Attributes:
        session_factory: Produces a fresh AsyncSession per attempt.
        policy: Retry/backoff policy.
        timeout_seconds: Upper bound for one attempt, commit included.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        policy: RetryPolicy | None = None,
        timeout_seconds: float = 10.0,
        retryable: Callable[[BaseException], bool] = is_retryable,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session_factory = session_factory
        self.policy = policy or RetryPolicy()
        self.timeout_seconds = timeout_seconds
        self._retryable = retryable
        self._sleep = sleep

    async def _attempt(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            async with session.begin():
                return await operation(session)

    async def run(
        self,
        operation: Callable[[AsyncSession], Awaitable[T]],
        name: str = "mutation",
    ) -> T:
        """Execute ``operation`` in a transaction, retrying transient failures.

        Args:
            operation: Coroutine function receiving the attempt's session.
                It must not commit; the coordinator commits on success and
                rolls back on any exception.
            name: Operation name used in logs and the final error.

        Returns:
            Whatever ``operation`` returns on the committed attempt.

        Raises:
            FatalStoreError: When every attempt failed transiently.
            Exception: Any non-retryable error, unchanged.
        """
        last_error: BaseException | None = None
        attempts = self.policy.max_attempts

        for attempt in range(attempts):
            try:
                return await asyncio.wait_for(
                    self._attempt(operation), timeout=self.timeout_seconds
                )
            except Exception as exc:
                if not self._retryable(exc):
                    raise
                last_error = exc
                if attempt + 1 >= attempts:
                    break
                delay = self.policy.delay_for(attempt)
                logger.warning(
                    "transaction_retry",
                    operation=name,
                    attempt=attempt + 1,
                    max_attempts=attempts,
                    delay_seconds=delay,
                    error=repr(exc),
                )
                await self._sleep(delay)

        logger.error(
            "transaction_retries_exhausted",
            operation=name,
            attempts=attempts,
            error=repr(last_error),
        )
        raise FatalStoreError(
            f"{name} failed after {attempts} attempts: {last_error!r}",
            attempts=attempts,
        ) from last_error
