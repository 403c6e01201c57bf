# src/taskboard/cache/cache_errors.py

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for errors raised by taskboard itself."""


class FetchFailure(TaskboardError):
    """
    A caller-supplied fetcher raised (or timed out).

    The original exception is kept as `cause` and chained via __cause__.
    """

    def __init__(self, resource_key: str, subject_id: str, cause: BaseException) -> None:
        self.resource_key = resource_key
        self.subject_id = subject_id
        self.cause = cause
        super().__init__(f"fetch failed for {resource_key}/{subject_id}: {cause!r}")
        self.__cause__ = cause

    @property
    def timed_out(self) -> bool:
        return isinstance(self.cause, TimeoutError)
