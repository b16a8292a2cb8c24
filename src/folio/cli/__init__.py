"""Operator CLI sub-commands for Folio."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from folio.engine.factory import FolioEngine
    from folio.main import AppContext

T = TypeVar("T")


def run_with_engine(ctx: AppContext, operation: Callable[[FolioEngine], Awaitable[T]]) -> T:
    """Run one engine call to completion on a fresh event loop.

    Scheduled asset sweeps are drained and the connection pool disposed
    before the loop closes.
    """

    async def _run() -> T:
        engine = ctx.build_engine()
        try:
            return await operation(engine)
        finally:
            await engine.aclose()
            await ctx.engine.dispose()

    return asyncio.run(_run())
