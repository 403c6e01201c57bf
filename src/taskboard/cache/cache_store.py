# src/taskboard/cache/cache_store.py

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from ..core.ports import Clock
from .cache_models import DEFAULT_TTL_SECONDS, CacheEntry, CacheMetadata, Record, cache_key
from .change_detector import ChangeDetector
from .change_notifier import ChangeNotifier

logger = logging.getLogger(__name__)


class CacheStore:
    """
    In-memory snapshot cache keyed by (resource_key, subject_id).

    Rules:
    - one CacheEntry per key, replaced wholesale on write (readers never see a
      half-built list)
    - fetched_at never moves backwards
    - freshness is computed at read time from the current clock and the ttl
      passed in, never stored

    Callers go through the public methods only; the map itself stays private so
    a lock can be added around these methods without touching callers.
    """

    def __init__(
        self,
        *,
        detector: ChangeDetector | None = None,
        notifier: ChangeNotifier | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.time,
        strict_recency: bool = False,
    ) -> None:
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._detector = detector or ChangeDetector()
        self._notifier = notifier
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._strict_recency = bool(strict_recency)
        self._seq = itertools.count(1)

    @property
    def default_ttl(self) -> float:
        return self._ttl

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    def now(self) -> float:
        return self._clock()

    def next_sequence(self) -> int:
        """Monotonic token taken before a fetch starts (see strict_recency)."""
        return next(self._seq)

    # ---- reads ----

    def get(self, resource_key: str, subject_id: str) -> CacheEntry | None:
        return self._entries.get((resource_key, subject_id))

    def get_items(self, resource_key: str, subject_id: str) -> list[Record] | None:
        entry = self.get(resource_key, subject_id)
        return None if entry is None else list(entry.items)

    def is_fresh(self, resource_key: str, subject_id: str, ttl: float | None = None) -> bool:
        entry = self.get(resource_key, subject_id)
        if entry is None:
            return False
        return self._entry_is_fresh(entry, ttl)

    def metadata(
        self, resource_key: str, subject_id: str, ttl: float | None = None
    ) -> CacheMetadata | None:
        entry = self.get(resource_key, subject_id)
        if entry is None:
            return None
        return CacheMetadata(
            fetched_at=entry.fetched_at,
            age=max(0.0, self.now() - entry.fetched_at),
            is_fresh=self._entry_is_fresh(entry, ttl),
            count=entry.count,
        )

    def stats(self) -> dict[str, dict[str, Any]]:
        """Diagnostic summary of every entry, keyed by "<resource>_<subject>"."""
        now = self.now()
        out: dict[str, dict[str, Any]] = {}
        for (resource_key, subject_id), entry in sorted(self._entries.items()):
            out[cache_key(resource_key, subject_id)] = {
                "count": entry.count,
                "fetched_at": entry.fetched_at,
                "age_seconds": round(max(0.0, now - entry.fetched_at), 1),
                "fresh": self._entry_is_fresh(entry, None),
            }
        return out

    def __len__(self) -> int:
        return len(self._entries)

    # ---- writes ----

    def set(
        self,
        resource_key: str,
        subject_id: str,
        items: Sequence[Record],
        *,
        sequence: int | None = None,
    ) -> bool:
        """
        Replace the snapshot and notify subscribers about records that were not
        in the previous one.

        Returns False when strict_recency is on and `sequence` is older than the
        stored snapshot's; nothing is written in that case.
        """
        key = (resource_key, subject_id)
        prior = self._entries.get(key)

        if self._strict_recency and prior is not None and sequence is not None:
            if sequence < prior.sequence:
                logger.info(
                    "Dropping out-of-order write key=%s seq=%s stored=%s",
                    cache_key(resource_key, subject_id),
                    sequence,
                    prior.sequence,
                )
                return False

        snapshot = tuple(items or ())
        now = self.now()
        fetched_at = now if prior is None else max(now, prior.fetched_at)
        if sequence is None:
            sequence = self.next_sequence()

        new_records: list[Record] = []
        if prior is not None:
            try:
                new_records = self._detector.new_records(prior.items, snapshot, resource_key)
            except Exception:
                logger.exception(
                    "new-record diff failed key=%s; storing without notifying",
                    cache_key(resource_key, subject_id),
                )

        self._entries[key] = CacheEntry(items=snapshot, fetched_at=fetched_at, sequence=sequence)
        logger.debug(
            "cache set key=%s count=%d new=%d",
            cache_key(resource_key, subject_id),
            len(snapshot),
            len(new_records),
        )

        if new_records and self._notifier is not None:
            self._notifier.notify(subject_id, resource_key, new_records)
        return True

    def invalidate(self, resource_key: str, subject_id: str) -> None:
        """Keep the snapshot for fallback but make it permanently stale."""
        key = (resource_key, subject_id)
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return
        self._entries[key] = replace(entry, invalidated=True)

    def clear(self, resource_key: str, subject_id: str) -> None:
        self._entries.pop((resource_key, subject_id), None)

    def clear_all(self) -> None:
        """
        Drop every cache entry.

        Refresh schedules and subscribers are not touched here; AppState.reset
        clears all three.
        """
        n = len(self._entries)
        self._entries.clear()
        logger.info("Cache cleared (%d entries)", n)

    # ---- helpers ----

    def _entry_is_fresh(self, entry: CacheEntry, ttl: float | None) -> bool:
        if entry.invalidated:
            return False
        ttl_s = self._ttl if ttl is None else float(ttl)
        return (self.now() - entry.fetched_at) < ttl_s
