# src/taskboard/cache/change_detector.py

from __future__ import annotations

"""
Record identity and new-record detection.

Identity is derived per record, first applicable rule wins:
1. explicit business key (ticket / slip id) used verbatim,
2. positional marker (source row) joined with a few distinguishing fields,
3. SHA-256 fingerprint of the record's canonical JSON form.

A record lacking rules 1 and 2 is not an error; it simply gets a fingerprint.
The same identities key the read-status store.
"""

import dataclasses
import hashlib
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .cache_models import Record

logger = logging.getLogger(__name__)

_MISSING = object()


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, _MISSING)
    return getattr(record, name, _MISSING)


def _present(value: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _sort_token(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def _canonical(value: Any) -> Any:
    """
    JSON-ready form of a record or field value with no process-dependent parts.

    Mapping keys become strings, sets become sorted lists, dataclasses and
    plain objects become their public attributes. Other values fall back to
    isoformat() or a non-default repr(), never an address-bearing one.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _canonical(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(v) for v in value), key=_sort_token)
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {str(k): _canonical(v) for k, v in vars(value).items() if not k.startswith("_")}
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return repr(value) if type(value).__repr__ is not object.__repr__ else type(value).__qualname__


def fingerprint(record: Any) -> str:
    """Deterministic content hash, stable across processes (unlike hash())."""
    try:
        raw = _sort_token(_canonical(record))
    except (TypeError, ValueError, RecursionError):
        # self-referencing or otherwise unencodable content
        logger.warning(
            "Record of type %s is not serializable; hashing its text", type(record).__qualname__
        )
        raw = f"{type(record).__qualname__}:{record}"
    return "sha256:" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:32]


@dataclass(slots=True, frozen=True)
class IdentityPolicy:
    """Field names consulted by the three identity rules for one resource type."""

    business_keys: tuple[str, ...] = ("ticketId", "ticket_id", "slipId", "slip_id", "id")
    position_keys: tuple[str, ...] = ("row", "rowNumber", "row_number")
    distinguishing_keys: tuple[str, ...] = ("fms", "type", "what_to_do", "description")

    def identity(self, record: Record) -> str:
        for name in self.business_keys:
            value = _field(record, name)
            if _present(value):
                return str(value)

        for name in self.position_keys:
            row = _field(record, name)
            if not _present(row):
                continue
            parts = [str(row)]
            for extra in self.distinguishing_keys:
                value = _field(record, extra)
                parts.append(str(value) if _present(value) else "")
            return "_".join(parts)

        return fingerprint(record)


DEFAULT_POLICY = IdentityPolicy()


class ChangeDetector:
    """
    Diffs two record snapshots by identity.

    Policies are looked up by resource key; unknown resources use the default.
    """

    def __init__(
        self,
        policies: Mapping[str, IdentityPolicy] | None = None,
        *,
        default_policy: IdentityPolicy = DEFAULT_POLICY,
    ) -> None:
        self._policies: dict[str, IdentityPolicy] = dict(policies or {})
        self._default = default_policy

    def register_policy(self, resource_key: str, policy: IdentityPolicy) -> None:
        self._policies[resource_key] = policy

    def policy_for(self, resource_key: str | None) -> IdentityPolicy:
        if resource_key is None:
            return self._default
        return self._policies.get(resource_key, self._default)

    def identity(self, record: Record, resource_key: str | None = None) -> str:
        return self.policy_for(resource_key).identity(record)

    def identities(self, records: Iterable[Record], resource_key: str | None = None) -> set[str]:
        policy = self.policy_for(resource_key)
        return {policy.identity(r) for r in records}

    def new_records(
        self,
        old: Sequence[Record],
        new: Sequence[Record],
        resource_key: str | None = None,
    ) -> list[Record]:
        """
        Records of `new` whose identity does not appear in `old`.

        O(len(old) + len(new)). Keeps `new` order; a repeated identity in `new`
        is reported once. Neither input is modified.
        """
        policy = self.policy_for(resource_key)
        seen = {policy.identity(r) for r in old}

        out: list[Record] = []
        for record in new:
            ident = policy.identity(record)
            if ident in seen:
                continue
            seen.add(ident)
            out.append(record)

        if out:
            logger.debug("new_records resource=%s found=%d", resource_key, len(out))
        return out
