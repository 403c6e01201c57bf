# tests/test_fetch_orchestrator.py

from __future__ import annotations

import asyncio

import pytest

from taskboard.cache.cache_errors import FetchFailure
from taskboard.cache.cache_models import LoadStatus
from taskboard.cache.cache_store import CacheStore
from taskboard.cache.fetch_orchestrator import FetchOrchestrator

from .fakes import CountingFetcher, FailingFetcher, FakeClock


@pytest.fixture()
def orchestrator(store: CacheStore) -> FetchOrchestrator:
    return FetchOrchestrator(store)


@pytest.mark.asyncio
async def test_first_load_fetches_and_caches(orchestrator: FetchOrchestrator, store: CacheStore) -> None:
    fetcher = CountingFetcher([{"id": 1}])

    result = await orchestrator.load("fms", "alice", fetcher)

    assert result.status == LoadStatus.FETCHED
    assert result.items == [{"id": 1}]
    assert result.ok
    assert fetcher.calls == 1
    assert store.get_items("fms", "alice") == [{"id": 1}]


@pytest.mark.asyncio
async def test_fresh_reads_do_not_call_fetcher(orchestrator: FetchOrchestrator, clock: FakeClock) -> None:
    warm = CountingFetcher([{"id": 1}])
    await orchestrator.load("fms", "alice", warm)

    fetcher = CountingFetcher([{"id": 2}])
    clock.now += 60
    first = await orchestrator.load("fms", "alice", fetcher)
    clock.now += 60
    second = await orchestrator.load("fms", "alice", fetcher)

    assert fetcher.calls == 0
    assert first.status == second.status == LoadStatus.CACHED
    assert second.items == [{"id": 1}]


@pytest.mark.asyncio
async def test_expired_entry_is_refetched(orchestrator: FetchOrchestrator, clock: FakeClock) -> None:
    fetcher = CountingFetcher([{"id": 1}])
    await orchestrator.load("fms", "alice", fetcher)

    clock.now += 900
    fetcher.items = [{"id": 1}, {"id": 2}]
    result = await orchestrator.load("fms", "alice", fetcher)

    assert fetcher.calls == 2
    assert result.items == [{"id": 1}, {"id": 2}]


@pytest.mark.asyncio
async def test_per_call_ttl_override(orchestrator: FetchOrchestrator, clock: FakeClock) -> None:
    fetcher = CountingFetcher([{"id": 1}])
    await orchestrator.load("fms", "alice", fetcher)
    clock.now += 30

    await orchestrator.load("fms", "alice", fetcher, ttl=10)
    assert fetcher.calls == 2


@pytest.mark.asyncio
async def test_stale_fallback_on_failure(orchestrator: FetchOrchestrator, store: CacheStore) -> None:
    store.set("fms", "alice", [{"id": 1}, {"id": 2}])
    failing = FailingFetcher()

    result = await orchestrator.load("fms", "alice", failing, force_refresh=True)

    assert failing.calls == 1
    assert result.status == LoadStatus.STALE
    assert result.is_stale
    assert result.items == [{"id": 1}, {"id": 2}]
    assert isinstance(result.error, FetchFailure)
    assert result.error.resource_key == "fms"
    assert result.unwrap() == [{"id": 1}, {"id": 2}]
    # snapshot is kept, not evicted
    assert store.get_items("fms", "alice") == [{"id": 1}, {"id": 2}]


@pytest.mark.asyncio
async def test_failure_without_cache_is_explicit(orchestrator: FetchOrchestrator) -> None:
    failing = FailingFetcher(ValueError("bad range"))

    result = await orchestrator.load("fms", "alice", failing)

    assert result.status == LoadStatus.FAILED
    assert result.items == []
    assert isinstance(result.error.cause, ValueError)
    with pytest.raises(FetchFailure) as excinfo:
        result.unwrap()
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_force_refresh_invalidates_even_when_fetch_fails(
    orchestrator: FetchOrchestrator, store: CacheStore
) -> None:
    await orchestrator.load("fms", "alice", CountingFetcher([{"id": 1}]))
    assert store.is_fresh("fms", "alice")

    await orchestrator.refresh("fms", "alice", FailingFetcher())
    assert store.is_fresh("fms", "alice") is False

    # next ordinary read goes back to the source instead of the pre-refresh snapshot
    fetcher = CountingFetcher([{"id": 1}, {"id": 2}])
    result = await orchestrator.load("fms", "alice", fetcher)
    assert fetcher.calls == 1
    assert result.items == [{"id": 1}, {"id": 2}]


@pytest.mark.asyncio
async def test_interim_snapshot_is_offered_unless_silent(
    orchestrator: FetchOrchestrator, store: CacheStore, clock: FakeClock
) -> None:
    store.set("fms", "alice", [{"id": 1}])
    clock.now += 10_000
    offered: list[list] = []

    await orchestrator.load("fms", "alice", CountingFetcher([{"id": 2}]), on_interim=offered.append)
    assert offered == [[{"id": 1}]]

    clock.now += 10_000
    await orchestrator.load(
        "fms", "alice", CountingFetcher([{"id": 3}]), silent=True, on_interim=offered.append
    )
    assert offered == [[{"id": 1}]]


@pytest.mark.asyncio
async def test_no_interim_when_nothing_cached(orchestrator: FetchOrchestrator) -> None:
    offered: list[list] = []
    await orchestrator.load("fms", "alice", CountingFetcher([{"id": 1}]), on_interim=offered.append)
    assert offered == []


@pytest.mark.asyncio
async def test_sync_fetcher_is_accepted(orchestrator: FetchOrchestrator) -> None:
    result = await orchestrator.load("fms", "alice", lambda: [{"id": 1}])
    assert result.items == [{"id": 1}]


@pytest.mark.asyncio
async def test_fetcher_returning_garbage_is_a_failure(orchestrator: FetchOrchestrator) -> None:
    result = await orchestrator.load("fms", "alice", lambda: "not rows")
    assert result.status == LoadStatus.FAILED
    assert isinstance(result.error.cause, TypeError)


@pytest.mark.asyncio
async def test_timeout_becomes_fetch_failure(store: CacheStore) -> None:
    orchestrator = FetchOrchestrator(store, fetch_timeout=0.01)

    async def hung() -> list:
        await asyncio.sleep(10)
        return []

    result = await orchestrator.load("fms", "alice", hung)
    assert result.status == LoadStatus.FAILED
    assert result.error.timed_out


@pytest.mark.asyncio
async def test_successful_load_drives_notifications(
    orchestrator: FetchOrchestrator, notifier, recorder
) -> None:
    notifier.subscribe("alice", recorder)
    fetcher = CountingFetcher([{"ticketId": "HT-1"}])
    await orchestrator.load("ht", "alice", fetcher)

    fetcher.items = [{"ticketId": "HT-1"}, {"ticketId": "HT-2"}]
    await orchestrator.refresh("ht", "alice", fetcher)

    assert [list(e.records) for e in recorder.events] == [[{"ticketId": "HT-2"}]]
