# src/taskboard/cache/refresh_scheduler.py

from __future__ import annotations

"""
Background refresh scheduler.

One asyncio task per (resource_key, subject_id). Each task sleeps for its
interval, then runs a silent forced load through FetchOrchestrator. A failed
tick is logged and the loop keeps going.

start() on a running key cancels the old task first, so a key never has two
live timers. stop() is idempotent.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from ..core.ports import Fetcher, SleepFn
from .cache_models import DEFAULT_REFRESH_INTERVAL_SECONDS, LoadStatus, cache_key
from .fetch_orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RefreshRegistration:
    resource_key: str
    subject_id: str
    fetcher: Fetcher
    interval: float
    task: asyncio.Task[None] | None = None
    stopped: bool = False
    ticks: int = field(default=0)

    def cancel(self) -> None:
        self.stopped = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


class RefreshScheduler:
    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        *,
        default_interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._orchestrator = orchestrator
        self._default_interval = float(default_interval)
        self._sleep = sleep
        self._registrations: dict[tuple[str, str], RefreshRegistration] = {}

    def start(
        self,
        resource_key: str,
        subject_id: str,
        fetcher: Fetcher,
        interval: float | None = None,
    ) -> RefreshRegistration:
        """
        Start (or restart) periodic refresh for one key.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        key = (resource_key, subject_id)
        previous = self._registrations.pop(key, None)
        if previous is not None:
            previous.cancel()
            logger.debug("Replaced refresh schedule for %s", cache_key(resource_key, subject_id))

        interval_s = self._default_interval if interval is None else float(interval)
        if interval_s <= 0:
            raise ValueError("interval must be positive")

        reg = RefreshRegistration(
            resource_key=resource_key,
            subject_id=subject_id,
            fetcher=fetcher,
            interval=interval_s,
        )
        reg.task = loop.create_task(
            self._run(reg), name=f"refresh:{cache_key(resource_key, subject_id)}"
        )
        self._registrations[key] = reg
        logger.info(
            "Auto-refresh started for %s every %.0fs",
            cache_key(resource_key, subject_id),
            interval_s,
        )
        return reg

    def stop(self, resource_key: str, subject_id: str) -> None:
        reg = self._registrations.pop((resource_key, subject_id), None)
        if reg is None:
            return
        reg.cancel()
        logger.info("Auto-refresh stopped for %s", cache_key(resource_key, subject_id))

    def stop_all(self) -> None:
        for key in list(self._registrations):
            self.stop(*key)

    async def aclose(self) -> None:
        """Stop everything and wait for the cancelled tasks to unwind."""
        tasks = [r.task for r in self._registrations.values() if r.task is not None]
        self.stop_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def is_running(self, resource_key: str, subject_id: str) -> bool:
        reg = self._registrations.get((resource_key, subject_id))
        return reg is not None and not reg.stopped

    def running(self) -> list[tuple[str, str]]:
        return sorted(self._registrations)

    def registration(self, resource_key: str, subject_id: str) -> RefreshRegistration | None:
        return self._registrations.get((resource_key, subject_id))

    async def _run(self, reg: RefreshRegistration) -> None:
        key = cache_key(reg.resource_key, reg.subject_id)

        while True:
            await self._sleep(reg.interval)
            if reg.stopped:
                return

            reg.ticks += 1
            try:
                result = await self._orchestrator.load(
                    reg.resource_key,
                    reg.subject_id,
                    reg.fetcher,
                    force_refresh=True,
                    silent=True,
                )
            except Exception:
                logger.exception("Auto-refresh tick crashed for %s", key)
                continue

            if result.status == LoadStatus.FETCHED:
                logger.info("Auto-refreshed %s (%d records)", key, len(result.items))
            else:
                logger.warning("Auto-refresh failed for %s: %s", key, result.error)
