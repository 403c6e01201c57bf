# tests/test_change_notifier.py

from __future__ import annotations

import pytest

from taskboard.cache.change_notifier import ChangeNotifier

from .fakes import EventRecorder


def test_subscribe_replaces_previous_callback() -> None:
    notifier = ChangeNotifier()
    first, second = EventRecorder(), EventRecorder()

    notifier.subscribe("alice", first)
    notifier.subscribe("alice", second)
    assert notifier.notify("alice", "fms", [{"id": 1}]) == 1

    assert first.events == []
    assert len(second.events) == 1


def test_notify_is_scoped_to_subject() -> None:
    notifier = ChangeNotifier()
    alice, bob = EventRecorder(), EventRecorder()
    notifier.subscribe("alice", alice)
    notifier.subscribe("bob", bob)

    notifier.notify("bob", "delegation", [{"id": 1}, {"id": 2}])

    assert alice.events == []
    assert bob.events[0].count == 2
    assert bob.events[0].resource_key == "delegation"


def test_unsubscribe_and_unknown_subject_are_noops() -> None:
    notifier = ChangeNotifier()
    rec = EventRecorder()
    notifier.subscribe("alice", rec)
    notifier.unsubscribe("alice")
    notifier.unsubscribe("alice")
    notifier.unsubscribe("nobody")

    assert notifier.notify("alice", "fms", [{"id": 1}]) == 0
    assert rec.events == []


def test_empty_new_records_fire_nothing() -> None:
    notifier = ChangeNotifier()
    rec = EventRecorder()
    notifier.subscribe("alice", rec)
    assert notifier.notify("alice", "fms", []) == 0
    assert rec.events == []


def test_failing_callback_is_contained() -> None:
    notifier = ChangeNotifier(multi_subscriber=True)
    rec = EventRecorder()

    def boom(event) -> None:
        raise RuntimeError("toast failed")

    notifier.subscribe("alice", boom)
    notifier.subscribe("alice", rec)

    assert notifier.notify("alice", "fms", [{"id": 1}]) == 1
    assert len(rec.events) == 1


def test_multi_subscriber_mode_keeps_all_and_removes_one() -> None:
    notifier = ChangeNotifier(multi_subscriber=True)
    a, b = EventRecorder(), EventRecorder()
    notifier.subscribe("alice", a)
    notifier.subscribe("alice", b)

    assert notifier.notify("alice", "fms", [{"id": 1}]) == 2

    notifier.unsubscribe("alice", a)
    notifier.notify("alice", "fms", [{"id": 2}])
    assert len(a.events) == 1
    assert len(b.events) == 2

    notifier.unsubscribe("alice", b)
    assert notifier.has_subscribers("alice") is False


def test_subject_is_required() -> None:
    with pytest.raises(ValueError):
        ChangeNotifier().subscribe("", EventRecorder())
