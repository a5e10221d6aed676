"""Expiration Sweeper — periodically flags capsules past their retention window as retired.

Invariants:
    - Each run is one atomic bulk UPDATE: retired=false AND unlock_at < now - window
    - Idempotent: a run with nothing newly eligible changes no rows
    - Never overlaps itself: a run requested while another is in flight is skipped
    - Failures are logged and swallowed; they never reach request handling
    - Every run acquires its own session and releases it on every path

Design Decisions:
    - Explicit task object owned by the FastAPI lifespan (start/stop), not a
      module-level timer, so tests drive a single tick with run_once()
    - Runs once immediately on start, then every interval_seconds
    - Reads are correct without the sweeper (lock_state recomputes retirement);
      the flag records which capsules a sweep has retired
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, suppress
from datetime import timedelta
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from timecapsule.core.domain_types import DEFAULT_RETENTION_WINDOW
from timecapsule.core.repository_protocols import Clock
from timecapsule.services.capsule_store import SqlCapsuleRepository

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class ExpirationSweeper:
    """Recurring retirement sweep over the capsule store."""

    def __init__(
        self,
        session_scope: SessionScope,
        clock: Clock,
        *,
        interval_seconds: float = 3600,
        retention_window: timedelta = DEFAULT_RETENTION_WINDOW,
    ):
        self._session_scope = session_scope
        self._clock = clock
        self._interval_seconds = interval_seconds
        self._retention_window = retention_window
        self._sweeping = False
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Run one sweep. Returns the number of capsules newly retired."""
        if self._sweeping:
            logger.debug("Expiration sweep already in progress, skipping tick")
            return 0
        self._sweeping = True
        try:
            now = self._clock.now()
            cutoff = now - self._retention_window
            async with self._session_scope() as db:
                count = await SqlCapsuleRepository(db).mark_overdue_retired(
                    cutoff=cutoff, now=now,
                )
            logger.info(
                f"Marked {count} capsules as retired",
                extra={"retired_count": count},
            )
            return count
        except Exception as e:
            logger.error(f"Expiration sweep failed: {e}", exc_info=True)
            return 0
        finally:
            self._sweeping = False

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval_seconds)

    def start(self) -> None:
        """Schedule the recurring sweep on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(
            self._loop(), name="capsule-expiration-sweeper",
        )
        logger.info(
            f"Expiration sweeper started (every {self._interval_seconds}s)",
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Expiration sweeper stopped")
