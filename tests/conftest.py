# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cache.cache_store import CacheStore
from taskboard.cache.change_notifier import ChangeNotifier
from taskboard.cli.bootstrap import build_state
from taskboard.core.state import AppState

from .fakes import EventRecorder, FakeClock, InMemoryReadStatus


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with build_state and the CLI commands.

    A SimpleNamespace rather than the real config keeps tests independent of
    the environment.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        log_file_level="DEBUG",
        quiet_loggers=["taskboard.cache.refresh_scheduler"],
        quiet_log_level="WARNING",
        subject_id="alice",
        resources=["delegation", "fms"],
        cache_ttl_seconds=900.0,
        refresh_interval_seconds=900.0,
        fetch_timeout_seconds=0.0,
        strict_recency=False,
        multi_subscriber=False,
        data_dir=tmp_path,
        sources_dir=tmp_path / "sources",
        read_status_db_path=tmp_path / "read_status.sqlite3",
        log_file=tmp_path / "logs" / "taskboard.log",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture()
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture()
def store(clock: FakeClock, notifier: ChangeNotifier) -> CacheStore:
    return CacheStore(notifier=notifier, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    """AppState wired with a simulated clock and in-memory read status."""
    return build_state(
        settings,
        read_status=InMemoryReadStatus(),
        clock=clock,
        sleep=clock.sleep,
    )
