import threading

import pytest

from core.services.notification_center import (
    NotificationCenter,
    NotificationRecord,
    PopoverState,
    format_badge_count,
)


def make_center(*flags):
    return NotificationCenter(NotificationRecord(id=f"n{i}", read=read) for i, read in enumerate(flags))


@pytest.mark.parametrize("count,expected", [
    (0, "0"),
    (1, "1"),
    (98, "98"),
    (99, "99"),
    (100, "99+"),
    (101, "99+"),
    (5000, "99+"),
])
def test_badge_overflow(count, expected):
    assert format_badge_count(count) == expected


def test_badge_text_at_one_hundred_unread():
    center = make_center(*([False] * 100))
    assert center.unread_count == 100
    assert center.badge_text == "99+"
    center.mark_as_read("n0")
    assert center.badge_text == "99"


def test_unread_count_is_derived_from_records():
    center = make_center(False, True, False)
    assert center.unread_count == 2
    assert center.has_unread is True
    snap = center.snapshot()
    assert snap.unread_count == sum(1 for n in snap.notifications if not n.read)


def test_mark_all_as_read_zeroes_count():
    center = make_center(False, False, True)
    assert center.mark_all_as_read() == 2
    assert center.unread_count == 0
    assert center.has_unread is False
    # idempotent
    assert center.mark_all_as_read() == 0
    assert center.unread_count == 0


def test_mark_all_as_read_on_empty_store():
    center = NotificationCenter()
    assert center.mark_all_as_read() == 0
    assert center.unread_count == 0
    assert center.badge_text == "0"


def test_mark_as_read_is_idempotent():
    center = make_center(False, False)
    assert center.mark_as_read("n1") is True
    after_once = center.notifications
    assert center.mark_as_read("n1") is False
    assert center.notifications == after_once
    assert center.unread_count == 1


def test_mark_as_read_unknown_id_changes_nothing():
    center = make_center(False, True)
    before = center.notifications
    assert center.mark_as_read("missing") is False
    assert center.notifications == before
    assert center.unread_count == 1


def test_mark_as_read_after_channel_removal_is_noop():
    center = make_center(False, False)
    assert center.remove("n0") is True
    assert center.mark_as_read("n0") is False
    assert center.unread_count == 1
    assert center.remove("n0") is False


def test_upsert_keeps_insertion_order_and_replaces_in_place():
    center = make_center(False, False)
    center.upsert(NotificationRecord(id="n2"))
    assert [n.id for n in center.notifications] == ["n0", "n1", "n2"]
    center.upsert(NotificationRecord(id="n0", read=True))
    assert [n.id for n in center.notifications] == ["n0", "n1", "n2"]
    assert center.get("n0").read is True
    assert center.unread_count == 2


def test_subscribers_see_fresh_snapshots():
    center = make_center(False, False)
    seen = []
    unsubscribe = center.subscribe(lambda snap: seen.append(snap.badge()))

    center.mark_as_read("n0")
    center.mark_as_read("n0")  # no change, no publish
    center.mark_all_as_read()

    assert seen == [
        {"unreadCount": 1, "hasUnread": True, "display": "1"},
        {"unreadCount": 0, "hasUnread": False, "display": "0"},
    ]
    unsubscribe()
    center.upsert(NotificationRecord(id="n9"))
    assert len(seen) == 2


def test_failing_listener_does_not_block_others():
    center = make_center(False)
    seen = []

    def broken(snap):
        raise RuntimeError("boom")

    center.subscribe(broken)
    center.subscribe(lambda snap: seen.append(snap.unread_count))
    assert center.mark_as_read("n0") is True
    assert seen == [0]
    assert center.unread_count == 0


def test_snapshot_is_immutable():
    center = make_center(False)
    snap = center.snapshot()
    with pytest.raises(AttributeError):
        snap.notifications[0].read = True  # type: ignore[misc]
    assert center.unread_count == 1


def test_popover_toggle_and_close():
    popover = PopoverState()
    assert popover.open is False
    popover.toggle()
    assert popover.open is True
    popover.toggle()
    assert popover.open is False

    assert popover.request_close() is False
    popover.toggle()
    assert popover.request_close() is False
    assert popover.open is False


def test_popover_set_open():
    popover = PopoverState()
    assert popover.set_open(True) is True
    assert popover.set_open(True) is True
    assert popover.set_open(False) is False


def test_record_fields_win_over_payload_keys():
    record = NotificationRecord(id="n1", read=True, payload={"id": "spoof", "read": False, "title": "Bed ready"})
    data = record.as_dict()
    assert data["id"] == "n1"
    assert data["read"] is True
    assert data["title"] == "Bed ready"


class _LockWithAfterRelease:
    """RLock that runs ``hook`` once, right after the outermost release."""

    def __init__(self, hook):
        self._lock = threading.RLock()
        self._depth = 0
        self._hook = hook

    def __enter__(self):
        self._lock.acquire()
        self._depth += 1
        return self

    def __exit__(self, *exc):
        self._depth -= 1
        self._lock.release()
        if self._depth == 0 and self._hook is not None:
            hook, self._hook = self._hook, None
            hook()


def test_published_snapshot_matches_its_own_mutation():
    center = make_center(False, False)
    seen = []
    center.subscribe(seen.append)
    # another mutation sneaks in between the lock release and the publish
    center._lock = _LockWithAfterRelease(lambda: center.upsert(NotificationRecord(id="late")))

    assert center.mark_as_read("n0") is True

    assert len(seen) == 2
    late, marked = seen
    assert [n.id for n in late.notifications] == ["n0", "n1", "late"]
    assert [n.id for n in marked.notifications] == ["n0", "n1"]
    assert marked.unread_count == 1
