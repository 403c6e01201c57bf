# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskboard.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKBOARD_SUBJECT_ID",
        "TASKBOARD_RESOURCES",
        "TASKBOARD_CACHE_TTL_SECONDS",
        "TASKBOARD_REFRESH_INTERVAL_SECONDS",
        "TASKBOARD_DATA_DIR",
        "TASKBOARD_SOURCES_DIR",
        "TASKBOARD_READ_STATUS_DB_PATH",
        "TASKBOARD_STRICT_RECENCY",
        "TASKBOARD_QUIET_LOGGERS",
        "TASKBOARD_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.cache_ttl_seconds == 900
    assert s.refresh_interval_seconds == 900
    assert s.strict_recency is False
    assert s.sources_dir == Path(".local/taskboard") / "sources"
    assert "delegation" in s.resources
    assert s.quiet_loggers == ["taskboard.cache.refresh_scheduler"]


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKBOARD_SUBJECT_ID", "alice")
    monkeypatch.setenv("TASKBOARD_RESOURCES", "fms, ht")
    monkeypatch.setenv("TASKBOARD_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("TASKBOARD_REFRESH_INTERVAL_SECONDS", "not-a-number")
    monkeypatch.setenv("TASKBOARD_STRICT_RECENCY", "yes")
    monkeypatch.setenv("TASKBOARD_QUIET_LOGGERS", "taskboard.cache, taskboard.sources")
    monkeypatch.setenv("TASKBOARD_DATA_DIR", str(tmp_path))

    s = Settings.from_env()
    assert s.subject_id == "alice"
    assert s.resources == ["fms", "ht"]
    assert s.cache_ttl_seconds == 60
    assert s.refresh_interval_seconds == 900
    assert s.strict_recency is True
    assert s.read_status_db_path == tmp_path / "read_status.sqlite3"
    assert s.log_file == tmp_path / "taskboard.log"
    assert s.quiet_loggers == ["taskboard.cache", "taskboard.sources"]
