"""
Evaluation Scheduler Module
Ticks the goal engine on a fixed interval inside the event loop
"""

from typing import Any, Dict, Optional
import asyncio
import logging

import schedule

from .engine import GoalEngine

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60


class EvaluationScheduler:
    """Periodically runs evaluation cycles with start/stop lifecycle"""

    def __init__(self, engine: GoalEngine,
                 interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
                 poll_seconds: float = 1.0):
        """
        Initialize scheduler

        Args:
            engine: Engine whose cycles are run
            interval_seconds: Seconds between cycles
            poll_seconds: How often pending jobs are checked
        """
        self.engine = engine
        self.interval_seconds = interval_seconds
        self.poll_seconds = poll_seconds
        self.jobs = schedule.Scheduler()
        self._task: Optional[asyncio.Task] = None
        self._due = False

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    def _mark_due(self):
        self._due = True

    async def tick(self) -> Dict[str, Any]:
        """Run a single cycle now"""
        return await self.engine.run_cycle()

    async def run_now(self) -> Dict[str, Any]:
        """Trigger an out-of-band cycle (skipped if one is already running)"""
        return await self.tick()

    async def _guarded_tick(self):
        try:
            await self.tick()
        except Exception as e:
            logger.error(f"Evaluation cycle error: {e}")

    async def _run_loop(self):
        # Initial check before the first interval elapses
        await self._guarded_tick()
        while True:
            self.jobs.run_pending()
            if self._due:
                self._due = False
                await self._guarded_tick()
            await asyncio.sleep(self.poll_seconds)

    def start(self) -> None:
        """Register the interval job and start ticking; must be called inside a running loop"""
        if self.is_started:
            return
        self.jobs.every(self.interval_seconds).seconds.do(self._mark_due)
        self._task = asyncio.get_running_loop().create_task(self._run_loop())
        logger.info(f"Goal evaluation scheduled every {self.interval_seconds}s")

    async def stop(self) -> None:
        """Cancel the ticking task and drop scheduled jobs"""
        self.jobs.clear()
        self._due = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Goal evaluation scheduler stopped")
