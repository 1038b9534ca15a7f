"""Owned periodic drivers with an injectable clock."""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol


logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime.now()

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current += delta
        return self.current

    def set(self, moment: datetime) -> None:
        self.current = moment


class PeriodicTask(ABC):
    """Runs ``run_cycle`` every ``interval`` between ``start()`` and ``stop()``.

    ``stop()`` only interrupts the wait between cycles: a cycle already in
    flight runs to completion before ``stop()`` returns.
    """

    name = "periodic task"

    def __init__(self, interval: timedelta, clock: Optional[Clock] = None):
        if interval.total_seconds() <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.clock: Clock = clock or SystemClock()
        self.cycles_run = 0
        self._task: Optional[asyncio.Task] = None
        self._stopping: Optional[asyncio.Event] = None

    @abstractmethod
    async def run_cycle(self) -> Any:
        """One full pass. Subclasses return their cycle report."""

    async def run_once(self) -> Any:
        report = await self.run_cycle()
        self.cycles_run += 1
        return report

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop."""
        if self.is_running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._loop(self._stopping), name=self.name)
        logger.info("Started %s (every %s)", self.name, self.interval)

    async def stop(self) -> None:
        """Stop after the current cycle, if any, finishes."""
        if self._task is None or self._stopping is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.info("Stopped %s after %d cycle(s)", self.name, self.cycles_run)

    async def _loop(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("%s cycle failed", self.name)
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self.interval.total_seconds())
            except asyncio.TimeoutError:
                pass
