"""Time source and sleep abstraction.

Retry backoff and cache expiry both depend on time. Routing them through a
Scheduler lets tests drive a simulated clock instead of waiting for real
seconds to pass.

Usage:
    scheduler = AsyncioScheduler()
    await scheduler.sleep(1.5)
    created = scheduler.now()
"""

import asyncio
from datetime import UTC, datetime
from typing import Protocol


class Scheduler(Protocol):
    """Clock plus cooperative sleep."""

    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for the given duration."""
        ...


class AsyncioScheduler:
    """Wall clock and asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class CancellationToken:
    """Cooperative cancellation flag for retry loops.

    The retry helper checks the token before every attempt and after every
    backoff wait. Cancelling does not interrupt a provider call already in
    flight.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


default_scheduler = AsyncioScheduler()
