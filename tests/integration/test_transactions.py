"""Integration tests for the transaction coordinator.

Tests cover:
- Commit on success and rollback of failed attempts
- Retry of transient errors, timeouts and unique violations
- Promotion to FatalStoreError once attempts run out
- Immediate propagation of domain errors
"""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from folio.database.models.lookup import Category
from folio.engine.transactions import RetryPolicy, TransactionCoordinator
from folio.errors import FatalStoreError, ProjectValidationError, TransientStoreError


async def _category_names(session_factory) -> list[str]:
    async with session_factory() as session:
        result = await session.execute(select(Category.name).order_by(Category.name))
        return list(result.scalars().all())


def _category(name: str) -> Category:
    return Category(name=name, slug=name.lower(), sort_order=0, created_by="system")


class TestTransactionCoordinator:
    """Tests for TransactionCoordinator.run."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, coordinator, session_factory):
        """Test that a successful closure is committed and its result returned."""

        async def operation(session):
            session.add(_category("Residential"))
            return "done"

        assert await coordinator.run(operation, name="add_category") == "done"
        assert await _category_names(session_factory) == ["Residential"]

    @pytest.mark.asyncio
    async def test_failed_attempt_is_rolled_back(self, coordinator, session_factory):
        """Test that writes of a failed attempt never become visible."""
        attempts = []

        async def operation(session):
            attempts.append(len(attempts))
            if len(attempts) == 1:
                session.add(_category("Discarded"))
                await session.flush()
                raise TransientStoreError("write conflict")
            session.add(_category("Kept"))

        await coordinator.run(operation)

        assert len(attempts) == 2
        assert await _category_names(session_factory) == ["Kept"]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_fatal(self, session_factory):
        """Test exponential backoff and the final FatalStoreError."""
        delays: list[float] = []

        async def record_sleep(delay: float) -> None:
            delays.append(delay)

        coordinator = TransactionCoordinator(
            session_factory,
            policy=RetryPolicy(max_attempts=3, base_delay=0.1),
            sleep=record_sleep,
        )
        calls = []

        async def operation(session):
            calls.append(1)
            raise TransientStoreError("write conflict")

        with pytest.raises(FatalStoreError) as exc_info:
            await coordinator.run(operation, name="save_draft")

        assert len(calls) == 3
        assert delays == pytest.approx([0.1, 0.2])
        assert exc_info.value.attempts == 3
        assert "save_draft failed after 3 attempts" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, TransientStoreError)

    @pytest.mark.asyncio
    async def test_domain_errors_are_not_retried(self, coordinator):
        """Test that a validation error aborts on the first attempt."""
        calls = []

        async def operation(session):
            calls.append(1)
            raise ProjectValidationError(["Title is required"])

        with pytest.raises(ProjectValidationError):
            await coordinator.run(operation)

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, coordinator):
        """Test that non-store errors are not wrapped."""

        async def operation(session):
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await coordinator.run(operation)

    @pytest.mark.asyncio
    async def test_attempt_timeout_is_retried(self, session_factory):
        """Test that an attempt exceeding the timeout counts as transient."""

        async def no_sleep(delay: float) -> None:
            return None

        coordinator = TransactionCoordinator(
            session_factory,
            policy=RetryPolicy(max_attempts=2, base_delay=0.0),
            timeout_seconds=0.05,
            sleep=no_sleep,
        )

        async def operation(session):
            await asyncio.sleep(1)

        with pytest.raises(FatalStoreError) as exc_info:
            await coordinator.run(operation, name="slow")

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)

    @pytest.mark.asyncio
    async def test_unique_violation_is_retried(self, coordinator, session_factory):
        """Test that losing an insert race re-runs the closure."""

        async def seed(session):
            session.add(_category("Residential"))

        await coordinator.run(seed)
        attempts = []

        async def operation(session):
            attempts.append(1)
            if len(attempts) == 1:
                session.add(_category("Residential"))
                await session.flush()
            existing = await session.scalar(
                select(func.count()).select_from(Category).where(Category.slug == "residential")
            )
            return existing

        assert await coordinator.run(operation) == 1
        assert len(attempts) == 2
