"""
In-process notification center backing the header bell.

The center owns one ordered set of notifications per consumer.  The
unread count is always derived from that set, never stored, so every
widget reading a snapshot sees the same number.  Two mutation sources
exist: the realtime channel (``upsert``/``remove``) and the user
(``mark_as_read``/``mark_all_as_read``).  Both go through one lock, and a
mark on an id the channel already removed is a no-op.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from django.utils import timezone

logger = logging.getLogger(__name__)

BADGE_OVERFLOW_LIMIT = 99
BADGE_OVERFLOW_TEXT = '99+'


def format_badge_count(count: int) -> str:
    """Badge text for ``count``: the exact number up to 99, then ``'99+'``."""
    if count > BADGE_OVERFLOW_LIMIT:
        return BADGE_OVERFLOW_TEXT
    return str(count)


@dataclass(frozen=True)
class NotificationRecord:
    id: str
    read: bool = False
    created_at: datetime = field(default_factory=timezone.now)
    payload: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict:
        # record fields win over display fields carried in the payload
        return {
            **self.payload,
            'id': self.id,
            'read': self.read,
            'createdAt': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class CenterSnapshot:
    notifications: tuple[NotificationRecord, ...]
    unread_count: int

    @property
    def has_unread(self) -> bool:
        return self.unread_count > 0

    @property
    def badge_text(self) -> str:
        return format_badge_count(self.unread_count)

    def badge(self) -> dict:
        return {
            'unreadCount': self.unread_count,
            'hasUnread': self.has_unread,
            'display': self.badge_text,
        }


Listener = Callable[[CenterSnapshot], None]


class NotificationCenter:
    def __init__(self, notifications: Iterable[NotificationRecord] = ()):
        self._items: 'OrderedDict[str, NotificationRecord]' = OrderedDict()
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        for n in notifications:
            self._items[n.id] = n

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def notifications(self) -> tuple[NotificationRecord, ...]:
        with self._lock:
            return tuple(self._items.values())

    @property
    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._items.values() if not n.read)

    @property
    def has_unread(self) -> bool:
        return self.unread_count > 0

    @property
    def badge_text(self) -> str:
        return format_badge_count(self.unread_count)

    def snapshot(self) -> CenterSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> CenterSnapshot:
        items = tuple(self._items.values())
        return CenterSnapshot(notifications=items, unread_count=sum(1 for n in items if not n.read))

    def get(self, notification_id: str) -> Optional[NotificationRecord]:
        with self._lock:
            return self._items.get(notification_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        with self._lock:
            return notification_id in self._items

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snap: CenterSnapshot) -> None:
        # snap is taken under the same lock hold as the mutation it reflects
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snap)
            except Exception:
                logger.exception('Notification listener %r failed', listener)

    # ------------------------------------------------------------------
    # Channel mutations
    # ------------------------------------------------------------------
    def upsert(self, notification: NotificationRecord) -> None:
        """Insert a new notification or replace one with the same id in place."""
        with self._lock:
            if self._items.get(notification.id) == notification:
                return
            self._items[notification.id] = notification
            snap = self._snapshot_locked()
        self._publish(snap)

    def remove(self, notification_id: str) -> bool:
        with self._lock:
            removed = self._items.pop(notification_id, None)
            if removed is None:
                return False
            snap = self._snapshot_locked()
        self._publish(snap)
        return True

    # ------------------------------------------------------------------
    # User mutations
    # ------------------------------------------------------------------
    def mark_as_read(self, notification_id: str) -> bool:
        """Mark one notification read.  Unknown or already-read ids are a no-op."""
        with self._lock:
            current = self._items.get(notification_id)
            if current is None or current.read:
                return False
            self._items[notification_id] = replace(current, read=True)
            snap = self._snapshot_locked()
        self._publish(snap)
        return True

    def mark_all_as_read(self) -> int:
        """Mark every notification read; returns how many changed."""
        with self._lock:
            unread = [n for n in self._items.values() if not n.read]
            for n in unread:
                self._items[n.id] = replace(n, read=True)
            if not unread:
                return 0
            snap = self._snapshot_locked()
        self._publish(snap)
        return len(unread)


class PopoverState:
    """Open/closed state of the notification popover.  Starts closed."""

    def __init__(self) -> None:
        self._open = False

    @property
    def open(self) -> bool:
        return self._open

    def toggle(self) -> bool:
        self._open = not self._open
        return self._open

    def request_close(self) -> bool:
        self._open = False
        return self._open

    def set_open(self, value: bool) -> bool:
        self._open = bool(value)
        return self._open
