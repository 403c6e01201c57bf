# tests/test_json_source.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskboard.cache.cache_models import LoadStatus
from taskboard.cli.bootstrap import create_initial_state
from taskboard.sources.json_source import SourceFormatError, json_file_fetcher


@pytest.mark.asyncio
async def test_list_file_is_shared_by_subjects(tmp_path: Path) -> None:
    (tmp_path / "fms.json").write_text(json.dumps([{"row": 2, "fms": "Dispatch"}, "junk"]), "utf-8")

    rows = await json_file_fetcher(tmp_path, "fms", "alice")()
    assert rows == [{"row": 2, "fms": "Dispatch"}]


@pytest.mark.asyncio
async def test_mapping_file_is_per_subject(tmp_path: Path) -> None:
    (tmp_path / "ht.json").write_text(
        json.dumps({"alice": [{"ticketId": "HT-1"}], "bob": [{"ticketId": "HT-2"}]}), "utf-8"
    )

    assert await json_file_fetcher(tmp_path, "ht", "bob")() == [{"ticketId": "HT-2"}]
    assert await json_file_fetcher(tmp_path, "ht", "carol")() == []


@pytest.mark.asyncio
async def test_missing_or_malformed_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await json_file_fetcher(tmp_path, "nope", "alice")()

    (tmp_path / "bad.json").write_text(json.dumps({"alice": "x"}), "utf-8")
    with pytest.raises(SourceFormatError):
        await json_file_fetcher(tmp_path, "bad", "alice")()


@pytest.mark.asyncio
async def test_bootstrap_wires_file_fetchers(settings) -> None:
    state = create_initial_state(settings=settings)
    (settings.sources_dir / "delegation.json").write_text(
        json.dumps([{"rowNumber": 2, "description": "Send report"}]), "utf-8"
    )

    assert sorted(state.fetchers) == ["delegation", "fms"]

    ok = await state.orchestrator.load("delegation", "alice", state.fetchers["delegation"])
    assert ok.status == LoadStatus.FETCHED

    missing = await state.orchestrator.load("fms", "alice", state.fetchers["fms"])
    assert missing.status == LoadStatus.FAILED
    assert settings.read_status_db_path.exists()
