"""
Periodic delivery assignment sweep.

Runs AssignmentService.sweep() every ASSIGNMENT_SWEEP_INTERVAL_SECONDS so
orders that found no courier when they went Out for Delivery are retried.
The sweep itself is synchronous database work and runs in a worker thread.

This sweeper can run:
1. As a FastAPI background task (lifespan startup)
2. As a one-shot command (`python cli.py assign-deliveries`)
"""

import asyncio

from rest_api.services.domain.assignment_service import AssignmentService, SweepSummary
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db_context

logger = get_logger(__name__)


def run_sweep_once() -> SweepSummary:
    """One sweep in a fresh session."""
    with get_db_context() as db:
        return AssignmentService(db).sweep()


class AssignmentSweeper:
    """
    Background loop around run_sweep_once().

    A failing sweep is logged and retried on the next tick; it never
    stops the loop.
    """

    def __init__(self, interval_seconds: float | None = None):
        self._interval = (
            settings.assignment_sweep_interval_seconds if interval_seconds is None else interval_seconds
        )
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the sweep loop. A non-positive interval disables it."""
        if self._interval <= 0:
            logger.info("Assignment sweeper disabled")
            return
        if self._running:
            logger.warning("Assignment sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Assignment sweeper started", interval_seconds=self._interval)

    async def stop(self) -> None:
        """Stop the sweeper gracefully."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Assignment sweeper stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.to_thread(run_sweep_once)
            except Exception as e:
                logger.error("Assignment sweep error", error=str(e), exc_info=True)
            await asyncio.sleep(self._interval)


# Singleton instance
_sweeper: AssignmentSweeper | None = None


def get_assignment_sweeper() -> AssignmentSweeper:
    """Get the singleton sweeper instance."""
    global _sweeper
    if _sweeper is None:
        _sweeper = AssignmentSweeper()
    return _sweeper


async def start_assignment_sweeper() -> None:
    """Start the sweeper (call in FastAPI lifespan startup)."""
    await get_assignment_sweeper().start()


async def stop_assignment_sweeper() -> None:
    """Stop the sweeper (call in FastAPI lifespan shutdown)."""
    await get_assignment_sweeper().stop()
