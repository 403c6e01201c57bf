# src/taskboard/readstatus/read_status_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class ReadStatusStore:
    """
    SQLite store of record identities a subject has already read.

    Keys are ChangeDetector identities, so "new since last fetch" and
    "unread" talk about the same records.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "read_status.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("ReadStatusStore ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS read_items (
                    subject_id TEXT NOT NULL,
                    identity TEXT NOT NULL,
                    read_at REAL NOT NULL,
                    PRIMARY KEY (subject_id, identity)
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get_read_identities(self, subject_id: str) -> set[str]:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "SELECT identity FROM read_items WHERE subject_id = ?",
                (subject_id,),
            )
            return {str(row["identity"]) for row in cur.fetchall()}
        finally:
            conn.close()

    def mark_read(self, subject_id: str, identities: Iterable[str] | str) -> set[str]:
        """Add one identity or many; returns the subject's full read set."""
        if not subject_id:
            raise ValueError("subject_id is required")
        if isinstance(identities, str):
            identities = [identities]
        now = time.time()
        rows = [(subject_id, str(i), now) for i in identities if i]

        conn = self._get_conn()
        try:
            conn.executemany(
                "INSERT OR IGNORE INTO read_items (subject_id, identity, read_at) VALUES (?, ?, ?)",
                rows,
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("mark_read subject=%s n=%d", subject_id, len(rows))
        return self.get_read_identities(subject_id)

    def mark_unread(self, subject_id: str, identity: str) -> set[str]:
        conn = self._get_conn()
        try:
            conn.execute(
                "DELETE FROM read_items WHERE subject_id = ? AND identity = ?",
                (subject_id, identity),
            )
            conn.commit()
        finally:
            conn.close()
        return self.get_read_identities(subject_id)

    def clear_subject(self, subject_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM read_items WHERE subject_id = ?", (subject_id,))
            conn.commit()
        finally:
            conn.close()
