# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..cache.cache_store import CacheStore
from ..cache.change_notifier import ChangeNotifier
from ..cache.fetch_orchestrator import FetchOrchestrator
from ..cache.refresh_scheduler import RefreshScheduler
from .ports import Fetcher, ReadStatusRepo


@dataclass
class AppState:
    """
    Everything a running dashboard session shares.

    Built once by cli.bootstrap (or by tests) and passed around explicitly;
    there is no process-wide cache singleton.
    """

    settings: Any

    cache: CacheStore
    notifier: ChangeNotifier
    orchestrator: FetchOrchestrator
    scheduler: RefreshScheduler
    read_status: ReadStatusRepo

    # resource_key -> fetcher for the current subject
    fetchers: dict[str, Fetcher] = field(default_factory=dict)

    @property
    def subject_id(self) -> str:
        return str(getattr(self.settings, "subject_id", ""))

    async def reset(self) -> None:
        """Stop every refresh schedule, drop all subscribers and empty the cache."""
        await self.scheduler.aclose()
        self.notifier.clear()
        self.cache.clear_all()
