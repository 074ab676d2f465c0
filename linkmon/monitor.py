"""Scheduled uptime monitoring.

The monitor sweeps every stored link once at start-up and then at each
wall-clock interval boundary (top of the hour by default). A sweep takes a
snapshot of the link store, probes each link and appends one uptime check
per link. Per-link failures are logged and counted; they never end a sweep.

Overlapping sweeps are skipped: a trigger that fires while a sweep is still
running returns a ``skipped`` result. With Redis configured the same guard
also spans processes.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Set

from .coordination import SweepLock
from .database.base import LinkStoreBase
from .database.models import CheckStatus, Link, utc_now
from .recorder import UptimeRecorder


class MonitorState(str, Enum):
    IDLE = "idle"
    SWEEPING = "sweeping"


@dataclass
class SweepResult:
    """Outcome counts of one sweep."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    total: int = 0
    up: int = 0
    down: int = 0
    failed: int = 0
    skipped: bool = False

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict:
        return {
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "total": self.total,
            "up": self.up,
            "down": self.down,
            "failed": self.failed,
            "skipped": self.skipped,
        }


def seconds_until_next_run(now: datetime, interval_minutes: int = 60) -> float:
    """Seconds from ``now`` to the next wall-clock multiple of the interval.

    Boundaries are counted from midnight, so 60 gives the top of every hour.
    Exactly on a boundary the full interval is returned.
    """
    interval = interval_minutes * 60
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    next_boundary = (elapsed // interval + 1) * interval
    return next_boundary - elapsed


class UptimeMonitor:
    """Owns the recurring sweep schedule."""

    def __init__(
        self,
        store: LinkStoreBase,
        recorder: UptimeRecorder,
        sweep_lock: Optional[SweepLock] = None,
        concurrency: int = 10,
        interval_minutes: int = 60,
        clock: Callable[[], datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize monitor.

        Args:
            store: Link store to snapshot
            recorder: Probe-and-persist step for one link
            sweep_lock: Optional cross-process lock
            concurrency: Maximum links probed at the same time
            interval_minutes: Schedule interval, aligned to the wall clock
            clock: Source of the current time
            logger: Optional logger
        """
        self.store = store
        self.recorder = recorder
        self.sweep_lock = sweep_lock or SweepLock()
        self.concurrency = max(1, concurrency)
        self.interval_minutes = interval_minutes
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

        self.last_sweep: Optional[SweepResult] = None
        self._sweeping = False
        self._task: Optional[asyncio.Task] = None
        self._sweep_tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> MonitorState:
        return MonitorState.SWEEPING if self._sweeping else MonitorState.IDLE

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Sweep now and schedule the recurring sweeps."""
        if self.running:
            return

        self.logger.info(
            f"Initializing uptime monitor (every {self.interval_minutes} min, "
            f"concurrency={self.concurrency})"
        )
        self._task = asyncio.create_task(self._run_forever(), name="uptime-monitor")

    async def stop(self) -> None:
        """Cancel the schedule and any sweep still in flight."""
        tasks = list(self._sweep_tasks)
        if self._task is not None:
            tasks.append(self._task)

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._task = None
        self._sweep_tasks.clear()
        self.logger.info("Uptime monitor stopped")

    async def _run_forever(self) -> None:
        self._spawn_sweep()
        while True:
            delay = seconds_until_next_run(self.clock(), self.interval_minutes)
            self.logger.debug(f"Next uptime sweep in {delay:.0f}s")
            await asyncio.sleep(delay)
            self._spawn_sweep()

    def _spawn_sweep(self) -> None:
        # Each trigger gets its own task so a slow sweep never delays the schedule;
        # run_sweep decides whether to skip.
        task = asyncio.create_task(self.run_sweep())
        self._sweep_tasks.add(task)
        task.add_done_callback(self._on_sweep_done)

    def _on_sweep_done(self, task: asyncio.Task) -> None:
        self._sweep_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(f"Uptime sweep crashed: {task.exception()}")

    async def run_sweep(self) -> SweepResult:
        """Run one sweep now unless another one is in progress.

        Returns:
            The sweep result; ``skipped`` is set when nothing ran
        """
        if self._sweeping:
            self.logger.warning("Previous uptime sweep still running, skipping this trigger")
            return SweepResult(started_at=self.clock(), finished_at=self.clock(), skipped=True)

        self._sweeping = True
        try:
            if not await self.sweep_lock.acquire():
                self.logger.info("Another process holds the sweep lock, skipping")
                return SweepResult(started_at=self.clock(), finished_at=self.clock(), skipped=True)
            try:
                result = await self._sweep()
            finally:
                await self.sweep_lock.release()
        finally:
            self._sweeping = False

        self.last_sweep = result
        return result

    async def _sweep(self) -> SweepResult:
        result = SweepResult(started_at=self.clock())
        self.logger.info("Starting uptime check...")

        try:
            links = await self.store.list_all_links()
        except Exception as e:
            self.logger.error(f"Error in uptime monitor, could not list links: {e}")
            result.finished_at = self.clock()
            return result

        result.total = len(links)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def check_one(link: Link) -> Optional[CheckStatus]:
            async with semaphore:
                try:
                    check = await self.recorder.check_and_record(link)
                except Exception as e:
                    self.logger.warning(
                        f"Uptime check failed for {link.short_code} ({link.target_url}): "
                        f"{type(e).__name__}: {e}"
                    )
                    return None
                return check.status

        statuses = await asyncio.gather(*(check_one(link) for link in links))

        for status in statuses:
            if status is None:
                result.failed += 1
            elif status == CheckStatus.UP:
                result.up += 1
            else:
                result.down += 1

        result.finished_at = self.clock()
        self.logger.info(
            f"Uptime check completed for {result.total} links "
            f"(up={result.up}, down={result.down}, failed={result.failed}) "
            f"in {result.duration_seconds:.1f}s"
        )
        return result
