"""Sync triggers: write debounce, deferred startup sync, foreground and manual sync."""
import asyncio
from typing import Optional

from loguru import logger

from habit_tracker.models.sync import SyncStatus
from habit_tracker.services.sync_service import SyncEngine


BACKGROUND_STATES = ("inactive", "background")


class SyncScheduler:
    """Turns app events into sync cycles on the running event loop."""

    def __init__(
        self,
        engine: SyncEngine,
        debounce_seconds: float = 3.0,
        initial_delay_seconds: float = 3.0,
    ):
        self.engine = engine
        self.debounce_seconds = debounce_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.app_state = "active"

        self._write_handle: Optional[asyncio.TimerHandle] = None
        self._initial_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def write_sync_pending(self) -> bool:
        return self._write_handle is not None and not self._write_handle.cancelled()

    def schedule_after_write(self) -> None:
        """
        (Re)start the write debounce timer.

        Each call cancels the pending timer, so a burst of writes produces a
        single sync once the burst has been quiet for ``debounce_seconds``.
        """
        if self._write_handle is not None:
            self._write_handle.cancel()
        loop = asyncio.get_running_loop()
        self._write_handle = loop.call_later(self.debounce_seconds, self._fire_write)

    def schedule_initial_sync(self) -> None:
        """Run one sync shortly after the local store has been opened."""
        if self._initial_handle is not None:
            self._initial_handle.cancel()
        loop = asyncio.get_running_loop()
        self._initial_handle = loop.call_later(self.initial_delay_seconds, self._fire, "startup")

    def notify_app_state(self, state: str) -> bool:
        """
        Track the app lifecycle; coming back to the foreground triggers a sync.

        Returns:
            True if a sync was triggered
        """
        previous = self.app_state
        self.app_state = state

        if previous in BACKGROUND_STATES and state == "active":
            self._fire("foreground")
            return True
        return False

    async def sync_now(self) -> SyncStatus:
        """Run a sync immediately and wait for it."""
        logger.debug("Sync triggered: manual")
        return await self.engine.perform_sync()

    def _fire_write(self) -> None:
        self._write_handle = None
        self._fire("write")

    def _fire(self, reason: str) -> None:
        logger.debug("Sync triggered: {}", reason)
        task = asyncio.get_running_loop().create_task(self.engine.perform_sync())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error("Scheduled sync crashed")

    async def aclose(self) -> None:
        """Cancel pending timers and wait for running syncs to finish."""
        for handle in (self._write_handle, self._initial_handle):
            if handle is not None:
                handle.cancel()
        self._write_handle = None
        self._initial_handle = None

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
