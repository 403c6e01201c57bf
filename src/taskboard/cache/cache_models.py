# src/taskboard/cache/cache_models.py

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .cache_errors import FetchFailure

Record = Mapping[str, Any]
# One opaque domain item (task/ticket/slip row). Treated as an immutable snapshot.

DEFAULT_TTL_SECONDS = 15 * 60
DEFAULT_REFRESH_INTERVAL_SECONDS = 15 * 60


def cache_key(resource_key: str, subject_id: str) -> str:
    """Display form of a (resource, subject) pair, used in logs and stats."""
    return f"{resource_key}_{subject_id}"


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """
    One cached snapshot for (resource_key, subject_id).

    Entries are replaced wholesale on every successful refresh; nothing
    mutates `items` in place.
    """

    items: tuple[Record, ...]
    fetched_at: float
    sequence: int = 0
    invalidated: bool = False

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass(slots=True, frozen=True)
class CacheMetadata:
    fetched_at: float
    age: float
    is_fresh: bool
    count: int


class LoadStatus(StrEnum):
    """How FetchOrchestrator.load produced its items."""

    CACHED = "cached"  # fresh snapshot, fetcher not invoked
    FETCHED = "fetched"
    STALE = "stale"  # fetch failed, previous snapshot served
    FAILED = "failed"  # fetch failed and nothing was cached


@dataclass(slots=True, frozen=True)
class LoadResult:
    items: list[Record]
    status: LoadStatus
    error: FetchFailure | None = None
    fetched_at: float | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_stale(self) -> bool:
        return self.status == LoadStatus.STALE

    def unwrap(self) -> list[Record]:
        """
        Return items, raising the fetch failure when there was nothing to fall back to.

        A STALE result still returns its items; the error stays advisory.
        """
        if self.status == LoadStatus.FAILED and self.error is not None:
            raise self.error
        return self.items


@dataclass(slots=True, frozen=True)
class NewRecordsEvent:
    """Payload delivered to ChangeNotifier subscribers."""

    resource_key: str
    subject_id: str
    records: Sequence[Record] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.records)
