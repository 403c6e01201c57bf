# src/taskboard/cache/fetch_orchestrator.py

from __future__ import annotations

"""
Stale-while-revalidate loading.

load():
1. fresh snapshot and no force_refresh -> return it, fetcher untouched
2. otherwise hand any cached snapshot to on_interim (unless silent)
3. call the fetcher
   - ok     -> write to CacheStore, return FETCHED
   - failed -> previous snapshot as STALE + error, or empty FAILED + error
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence

from ..core.ports import Fetcher
from .cache_errors import FetchFailure
from .cache_models import LoadResult, LoadStatus, Record, cache_key
from .cache_store import CacheStore

logger = logging.getLogger(__name__)

InterimCallback = Callable[[list[Record]], None]


async def call_fetcher(fetcher: Fetcher, *, timeout: float | None = None) -> list[Record]:
    """Run a sync or async fetcher, with an optional deadline for async ones."""
    result = fetcher()
    if inspect.isawaitable(result):
        if timeout is not None and timeout > 0:
            result = await asyncio.wait_for(result, timeout=timeout)
        else:
            result = await result
    if result is None:
        return []
    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
        raise TypeError(f"fetcher returned {type(result).__name__}, expected a list of records")
    return list(result)


class FetchOrchestrator:
    def __init__(self, store: CacheStore, *, fetch_timeout: float | None = None) -> None:
        self._store = store
        self._timeout = fetch_timeout if fetch_timeout and fetch_timeout > 0 else None

    @property
    def store(self) -> CacheStore:
        return self._store

    async def load(
        self,
        resource_key: str,
        subject_id: str,
        fetcher: Fetcher,
        *,
        force_refresh: bool = False,
        silent: bool = False,
        ttl: float | None = None,
        on_interim: InterimCallback | None = None,
        timeout: float | None = None,
    ) -> LoadResult:
        store = self._store
        key = cache_key(resource_key, subject_id)

        if not force_refresh and store.is_fresh(resource_key, subject_id, ttl):
            entry = store.get(resource_key, subject_id)
            if entry is not None:
                return LoadResult(
                    items=list(entry.items),
                    status=LoadStatus.CACHED,
                    fetched_at=entry.fetched_at,
                )

        if force_refresh:
            store.invalidate(resource_key, subject_id)

        cached = store.get(resource_key, subject_id)
        if cached is not None and not silent and on_interim is not None:
            try:
                on_interim(list(cached.items))
            except Exception:
                logger.exception("on_interim callback failed key=%s", key)

        sequence = store.next_sequence()
        try:
            items = await call_fetcher(fetcher, timeout=timeout or self._timeout)
        except Exception as e:
            failure = FetchFailure(resource_key, subject_id, e)
            # The snapshot may have changed while we were waiting on the fetcher.
            cached = store.get(resource_key, subject_id)
            if cached is not None:
                logger.warning("Fetch failed key=%s, serving stale snapshot: %r", key, e)
                return LoadResult(
                    items=list(cached.items),
                    status=LoadStatus.STALE,
                    error=failure,
                    fetched_at=cached.fetched_at,
                )
            logger.error("Fetch failed key=%s with nothing cached: %r", key, e)
            return LoadResult(items=[], status=LoadStatus.FAILED, error=failure)

        written = store.set(resource_key, subject_id, items, sequence=sequence)
        entry = store.get(resource_key, subject_id)
        if not written and entry is not None:
            # A newer fetch already landed; report what the cache holds.
            return LoadResult(
                items=list(entry.items),
                status=LoadStatus.FETCHED,
                fetched_at=entry.fetched_at,
            )

        logger.debug("Loaded key=%s count=%d silent=%s", key, len(items), silent)
        return LoadResult(
            items=items,
            status=LoadStatus.FETCHED,
            fetched_at=entry.fetched_at if entry is not None else None,
        )

    async def refresh(
        self,
        resource_key: str,
        subject_id: str,
        fetcher: Fetcher,
        *,
        silent: bool = False,
        on_interim: InterimCallback | None = None,
    ) -> LoadResult:
        """Manual refresh: always fetch, never serve the pre-refresh snapshot as fresh."""
        return await self.load(
            resource_key,
            subject_id,
            fetcher,
            force_refresh=True,
            silent=silent,
            on_interim=on_interim,
        )
