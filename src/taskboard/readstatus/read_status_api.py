# src/taskboard/readstatus/read_status_api.py

from __future__ import annotations

import logging

from ..cache.cache_models import Record
from ..core.state import AppState

logger = logging.getLogger(__name__)


def unread_records(state: AppState, subject_id: str, resource_key: str) -> list[Record]:
    """Cached records of a resource whose identity the subject has not marked read."""
    items = state.cache.get_items(resource_key, subject_id)
    if not items:
        return []

    read = state.read_status.get_read_identities(subject_id)
    detector = state.cache.detector
    return [r for r in items if detector.identity(r, resource_key) not in read]


def count_unread(state: AppState, subject_id: str, resource_keys: list[str] | None = None) -> int:
    keys = resource_keys if resource_keys is not None else list(state.settings.resources)
    total = 0
    for resource_key in keys:
        total += len(unread_records(state, subject_id, resource_key))
    logger.debug("count_unread subject=%s resources=%s total=%d", subject_id, keys, total)
    return total


def mark_resource_read(state: AppState, subject_id: str, resource_key: str) -> int:
    """Mark every cached record of a resource as read; returns how many were newly marked."""
    pending = unread_records(state, subject_id, resource_key)
    if not pending:
        return 0
    detector = state.cache.detector
    state.read_status.mark_read(subject_id, detector.identities(pending, resource_key))
    return len(pending)
