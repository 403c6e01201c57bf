"""In-memory cache and refresh engine for dashboard record sets."""

from .cache_errors import FetchFailure, TaskboardError
from .cache_models import (
    CacheEntry,
    CacheMetadata,
    LoadResult,
    LoadStatus,
    NewRecordsEvent,
    Record,
)
from .cache_store import CacheStore
from .change_detector import ChangeDetector, IdentityPolicy, fingerprint
from .change_notifier import ChangeNotifier
from .fetch_orchestrator import FetchOrchestrator
from .refresh_scheduler import RefreshRegistration, RefreshScheduler

__all__ = [
    "CacheEntry",
    "CacheMetadata",
    "CacheStore",
    "ChangeDetector",
    "ChangeNotifier",
    "FetchFailure",
    "FetchOrchestrator",
    "IdentityPolicy",
    "LoadResult",
    "LoadStatus",
    "NewRecordsEvent",
    "Record",
    "RefreshRegistration",
    "RefreshScheduler",
    "TaskboardError",
    "fingerprint",
]
