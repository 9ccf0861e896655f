"""Background purge of expired replay ledger rows."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatecha.core.settings import settings
from gatecha.db.session import SessionLocal
from gatecha.services.replay import ReplayLedger

logger = logging.getLogger(__name__)


class Reaper:
    """Periodically deletes consumed challenges whose expiry has passed.

    The loop checks a stop signal between ticks; a purge already running is
    always allowed to finish, so shutdown never interrupts a delete.
    """

    def __init__(
        self,
        interval_seconds: float | None = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else settings.cleanup_interval_seconds
        )
        self._session_factory = session_factory
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the purge loop if it is not already running."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the current tick to complete."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def purge_once(self) -> int:
        """Run a single purge in the calling thread and return the number of rows removed."""
        with self._session_factory() as db:
            return ReplayLedger(db).purge_expired()

    async def run_once(self) -> int:
        """Run a single purge off the event loop; failures are logged and count as zero."""
        try:
            removed = await asyncio.to_thread(self.purge_once)
        except SQLAlchemyError as e:
            logger.error("Reaper failed to purge expired challenges: %s", e)
            return 0
        if removed:
            logger.info("Reaper purged %d expired challenges", removed)
        return removed

    async def _run(self) -> None:
        interval = max(0.01, float(self.interval_seconds))

        while not self._stopping.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            if self._stopping.is_set():
                break
            await self.run_once()
