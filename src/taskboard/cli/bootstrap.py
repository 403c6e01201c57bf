# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the cache core and read-status store into AppState,
- builds one fetcher per configured resource.
"""

from __future__ import annotations

import logging

from ..cache.cache_store import CacheStore
from ..cache.change_detector import ChangeDetector
from ..cache.change_notifier import ChangeNotifier
from ..cache.fetch_orchestrator import FetchOrchestrator
from ..cache.refresh_scheduler import RefreshScheduler
from ..config import get_settings
from ..core.state import AppState
from ..readstatus.read_status_store import ReadStatusStore
from ..sources.json_source import json_file_fetcher

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.sources_dir.mkdir(parents=True, exist_ok=True)
    settings.read_status_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_state(settings, *, read_status=None, clock=None, sleep=None) -> AppState:
    """
    Wire the cache core from a settings object.

    clock/sleep are only overridden by tests that simulate time.
    """
    notifier = ChangeNotifier(multi_subscriber=bool(getattr(settings, "multi_subscriber", False)))

    store_kwargs = {}
    if clock is not None:
        store_kwargs["clock"] = clock
    cache = CacheStore(
        detector=ChangeDetector(),
        notifier=notifier,
        ttl_seconds=float(settings.cache_ttl_seconds),
        strict_recency=bool(getattr(settings, "strict_recency", False)),
        **store_kwargs,
    )

    orchestrator = FetchOrchestrator(
        cache, fetch_timeout=float(getattr(settings, "fetch_timeout_seconds", 0.0) or 0.0)
    )

    sched_kwargs = {}
    if sleep is not None:
        sched_kwargs["sleep"] = sleep
    scheduler = RefreshScheduler(
        orchestrator,
        default_interval=float(settings.refresh_interval_seconds),
        **sched_kwargs,
    )

    if read_status is None:
        read_status = ReadStatusStore(settings.read_status_db_path)

    return AppState(
        settings=settings,
        cache=cache,
        notifier=notifier,
        orchestrator=orchestrator,
        scheduler=scheduler,
        read_status=read_status,
    )


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState with file-backed fetchers for every configured resource.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = build_state(settings)
    for resource_key in settings.resources:
        state.fetchers[resource_key] = json_file_fetcher(
            settings.sources_dir, resource_key, settings.subject_id
        )

    logger.info(
        "State ready subject=%s resources=%s sources=%s",
        settings.subject_id,
        ",".join(settings.resources),
        settings.sources_dir,
    )
    return state
