"""
Reachability Worker

Background loop that re-runs the reachability probe on a fixed cadence
and whenever a refresh is requested (e.g. after network settings change).
Runs beside session operations without blocking them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..services.reachability import ReachabilityProber, ReachabilityStatus

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class WorkerConfig:
    """Configuration for the reachability worker."""
    interval_seconds: float = 30.0
    custom_endpoint: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "WorkerConfig":
        return cls(
            interval_seconds=settings.probe_interval_seconds,
            custom_endpoint=settings.custom_endpoint,
        )


class ReachabilityWorker:
    """Owns the periodic probe task."""

    def __init__(self, prober: ReachabilityProber, config: Optional[WorkerConfig] = None):
        self.prober = prober
        self.config = config or WorkerConfig.from_settings()
        self._wake = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def status(self) -> ReachabilityStatus:
        return self.prober.status

    async def run_once(self) -> ReachabilityStatus:
        status = await self.prober.check(self.config.custom_endpoint)
        self.cycles += 1
        return status

    def request_refresh(self, custom_endpoint: object = _UNSET) -> None:
        """Wake the loop for an immediate cycle, optionally changing the override."""
        if custom_endpoint is not _UNSET:
            self.config.custom_endpoint = custom_endpoint or None
        self._wake.set()

    async def refresh(self, custom_endpoint: object = _UNSET) -> ReachabilityStatus:
        """Run a cycle now and return its status."""
        if custom_endpoint is not _UNSET:
            self.config.custom_endpoint = custom_endpoint or None
        return await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info(f"Reachability worker started (every {self.config.interval_seconds}s)")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Reachability worker stopped")

    async def _loop(self, max_iterations: Optional[int] = None) -> None:
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self._wake.clear()
            await self.run_once()
            iterations += 1
            if max_iterations is not None and iterations >= max_iterations:
                break
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.config.interval_seconds)
            except asyncio.TimeoutError:
                pass


async def run_reachability_loop(
    prober: ReachabilityProber,
    config: Optional[WorkerConfig] = None,
    max_iterations: Optional[int] = None,
) -> ReachabilityStatus:
    """
    Run the probe loop in the foreground.

    Args:
        prober: Prober to drive
        config: Worker configuration
        max_iterations: Max cycles (None for infinite)

    Returns:
        The last published status
    """
    worker = ReachabilityWorker(prober, config)
    await worker._loop(max_iterations=max_iterations)
    return worker.status


# Singleton instance
_worker: Optional[ReachabilityWorker] = None


def get_reachability_worker() -> ReachabilityWorker:
    """Get the singleton reachability worker."""
    global _worker
    if _worker is None:
        _worker = ReachabilityWorker(ReachabilityProber())
    return _worker


def set_reachability_worker(worker: Optional[ReachabilityWorker]) -> None:
    global _worker
    _worker = worker
