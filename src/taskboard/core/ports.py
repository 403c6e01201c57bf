# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the cache core.

The core depends on Protocols and plain callables instead of concrete
implementations, so the spreadsheet API client, the read-status storage and
the clock stay swappable and tests can use fakes.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol

if TYPE_CHECKING:
    from ..cache.cache_models import NewRecordsEvent

RecordLike = Mapping[str, Any]

Fetcher = Callable[[], "Awaitable[Sequence[RecordLike]] | Sequence[RecordLike]"]
# Zero-argument operation that returns the current rows of one resource for one
# subject. May be sync or async. Must tolerate repeated calls.

Clock = Callable[[], float]
# Wall-clock seconds, time.time compatible.

SleepFn = Callable[[float], Awaitable[None]]
# asyncio.sleep compatible; injected so tests can drive simulated time.

NewRecordsCallback = Callable[["NewRecordsEvent"], None]


class ReadStatusRepo(Protocol):
    """
    Durable per-subject set of identities the user has already seen.

    Identities are the ones produced by ChangeDetector.
    """

    def get_read_identities(self, subject_id: str) -> set[str]: ...
    def mark_read(self, subject_id: str, identities: Iterable[str] | str) -> set[str]: ...
    def mark_unread(self, subject_id: str, identity: str) -> set[str]: ...
