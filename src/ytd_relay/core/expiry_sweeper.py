"""Periodic expiry sweep of the public downloads directory.

The sweeper knows nothing about jobs or sessions; it just calls
:meth:`FileStore.sweep` on a fixed period for as long as it runs.
"""

from __future__ import annotations

import asyncio
import logging

from ytd_relay.core.protocols import FileStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Runs ``store.sweep()`` every *interval* seconds.

    The first sweep happens one period after :meth:`start`, unless
    *sweep_on_boot* is set.
    """

    def __init__(
        self,
        store: FileStore,
        *,
        interval: float = 3600.0,
        sweep_on_boot: bool = False,
    ) -> None:
        self._store = store
        self._interval = interval
        self._sweep_on_boot = sweep_on_boot
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def sweep_once(self) -> int:
        """Run one sweep; returns the number of removed files."""
        try:
            removed = self._store.sweep()
        except Exception:
            logger.exception("Expiry sweep failed")
            return 0
        if removed:
            logger.info("Expiry sweep removed %d file(s)", len(removed))
        return len(removed)

    async def _loop(self) -> None:
        if self._sweep_on_boot:
            self.sweep_once()
        while True:
            await asyncio.sleep(self._interval)
            self.sweep_once()
