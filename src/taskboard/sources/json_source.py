# src/taskboard/sources/json_source.py

from __future__ import annotations

"""
File-backed fetchers for local runs and demos.

<sources_dir>/<resource>.json holds either
- a list of records (shared by every subject), or
- an object mapping subject_id -> list of records.

Real deployments plug in a spreadsheet API client instead; the cache core only
sees the zero-argument fetcher.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ..core.ports import Fetcher

logger = logging.getLogger(__name__)


class SourceFormatError(ValueError):
    pass


def _read_records(path: Path, subject_id: str) -> list[dict[str, Any]]:
    data = json.loads(path.read_text("utf-8"))

    if isinstance(data, dict):
        data = data.get(subject_id, [])

    if not isinstance(data, list):
        raise SourceFormatError(f"{path}: expected a list of records")

    out: list[dict[str, Any]] = []
    for i, row in enumerate(data):
        if not isinstance(row, dict):
            logger.warning("Skipping non-object row %d in %s", i, path)
            continue
        out.append(row)
    return out


def json_file_fetcher(sources_dir: str | Path, resource_key: str, subject_id: str) -> Fetcher:
    """Build an async fetcher that re-reads the resource file on every call."""
    path = Path(sources_dir) / f"{resource_key}.json"

    async def fetch() -> list[dict[str, Any]]:
        if not path.exists():
            raise FileNotFoundError(f"no source file for {resource_key!r}: {path}")
        return await asyncio.to_thread(_read_records, path, subject_id)

    return fetch
