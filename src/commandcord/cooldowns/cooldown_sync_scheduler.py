"""Scheduler that periodically writes persisted cooldown counters back to storage.

Runs CooldownManager.sync() on a fixed interval so a restart resumes long
cooldowns close to where they left off. Handles lifecycle (start/shutdown)
and standard error handling.
"""

from __future__ import annotations

import asyncio

from commandcord.cooldowns.cooldown_manager import CooldownManager
from commandcord.util.logger import get_logger

logger = get_logger("cooldown_sync_scheduler")

DEFAULT_SYNC_INTERVAL_SECONDS = 20.0


class CooldownSyncScheduler:
    """
    Background task that calls CooldownManager.sync() every ``interval`` seconds.

    Args:
        manager: The cooldown manager to sync.
        interval: Seconds between sync passes.
    """

    def __init__(self, manager: CooldownManager, interval: float = DEFAULT_SYNC_INTERVAL_SECONDS) -> None:
        self._manager = manager
        self._interval = interval
        self._task: asyncio.Task | None = None

    async def _run_loop(self) -> None:
        """Infinite loop: sync, sleep, repeat."""
        logger.info("[COOLDOWN SYNC] Starting periodic sync (interval=%.1fs)", self._interval)
        try:
            while True:
                await asyncio.sleep(self._interval)
                try:
                    written = await self._manager.sync()
                    if written:
                        logger.debug("[COOLDOWN SYNC] Synced %d cooldowns", written)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[COOLDOWN SYNC] Unexpected error during sync: %s", exc)
        except asyncio.CancelledError:
            logger.info("[COOLDOWN SYNC] Periodic sync cancelled")
            raise

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background sync task if not already running."""
        if self.running:
            logger.warning("[COOLDOWN SYNC] Sync task already running")
            return
        self._task = asyncio.create_task(self._run_loop())

    async def shutdown(self) -> None:
        """Stop the task and flush one final sync."""
        if self.running:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        await self._manager.sync()
        logger.info("[COOLDOWN SYNC] Scheduler shutdown complete")
