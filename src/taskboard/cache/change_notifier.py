# src/taskboard/cache/change_notifier.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.ports import NewRecordsCallback
from .cache_models import NewRecordsEvent, Record

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Per-subject new-record subscriptions.

    Default mode keeps at most one callback per subject: subscribing again
    replaces the previous one. With multi_subscriber=True every callback is kept
    and called in subscription order.

    Callbacks run synchronously inside CacheStore.set. A callback that raises is
    logged and skipped so it can never fail a cache write.
    """

    def __init__(self, *, multi_subscriber: bool = False) -> None:
        self._multi = bool(multi_subscriber)
        self._subs: dict[str, list[NewRecordsCallback]] = {}

    @property
    def multi_subscriber(self) -> bool:
        return self._multi

    def subscribe(self, subject_id: str, callback: NewRecordsCallback) -> None:
        if not subject_id:
            raise ValueError("subject_id is required")
        if self._multi:
            self._subs.setdefault(subject_id, []).append(callback)
        else:
            self._subs[subject_id] = [callback]
        logger.debug("subscribe subject=%s total=%d", subject_id, len(self._subs[subject_id]))

    def unsubscribe(self, subject_id: str, callback: NewRecordsCallback | None = None) -> None:
        """Remove one callback (multi mode) or every callback of the subject. Unknown subjects are a no-op."""
        callbacks = self._subs.get(subject_id)
        if not callbacks:
            return

        if callback is None:
            del self._subs[subject_id]
            return

        remaining = [cb for cb in callbacks if cb is not callback]
        if remaining:
            self._subs[subject_id] = remaining
        else:
            del self._subs[subject_id]

    def has_subscribers(self, subject_id: str) -> bool:
        return bool(self._subs.get(subject_id))

    def notify(self, subject_id: str, resource_key: str, new_records: Sequence[Record]) -> int:
        """
        Deliver a NewRecordsEvent to the subject's callbacks.

        Returns how many callbacks completed without raising.
        """
        if not new_records:
            return 0

        callbacks = list(self._subs.get(subject_id, ()))
        if not callbacks:
            return 0

        event = NewRecordsEvent(
            resource_key=resource_key,
            subject_id=subject_id,
            records=tuple(new_records),
        )
        delivered = 0
        for cb in callbacks:
            try:
                cb(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "new-records callback failed subject=%s resource=%s", subject_id, resource_key
                )

        logger.info(
            "Notified %d new %s record(s) for subject=%s", event.count, resource_key, subject_id
        )
        return delivered

    def clear(self) -> None:
        self._subs.clear()
