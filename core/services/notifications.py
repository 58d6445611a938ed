import logging
from typing import Optional, Any, Dict, List, Tuple

import bleach
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.models import Notification
from core.services.audit import try_log_action
from core.services.notification_center import NotificationCenter, NotificationRecord, format_badge_count

User = get_user_model()
logger = logging.getLogger(__name__)

EVENT_RECEIVED = 'NotificationReceived'
EVENT_READ = 'NotificationRead'
EVENT_DELETED = 'NotificationDeleted'
EVENT_CLEARED = 'NotificationsCleared'


def user_group(user_id) -> str:
    return f"notifications.user.{user_id}"


def serialize(n: Notification) -> dict:
    return {
        'id': n.id,
        'title': n.title,
        'message': n.message,
        'type': n.type,
        'read': n.read,
        'readAt': n.read_at.isoformat() if n.read_at else None,
        'createdAt': n.created_at.isoformat(),
        'payload': n.payload or {},
    }


def to_record(n: Notification) -> NotificationRecord:
    """Project a row into the center; the stored payload stays nested."""
    return NotificationRecord(
        id=n.id,
        read=n.read,
        created_at=n.created_at,
        payload={
            'title': n.title,
            'message': n.message,
            'type': n.type,
            'readAt': n.read_at.isoformat() if n.read_at else None,
            'payload': n.payload or {},
        },
    )


def unread_count(user: User) -> int:
    return Notification.objects.filter(recipient=user, read=False).count()


def badge_for(user: User) -> dict:
    count = unread_count(user)
    return {'unreadCount': count, 'hasUnread': count > 0, 'display': format_badge_count(count)}


def _broadcast(user_id, event: str, data: Dict[str, Any]) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    message = {"type": "notification.event", "event": event, **data}
    try:
        async_to_sync(channel_layer.group_send)(user_group(user_id), message)
    except Exception:
        logger.exception('Broadcast of %s to user %s failed', event, user_id)


def _broadcast_on_commit(user: User, event: str, data: Dict[str, Any]) -> None:
    user_id = user.id

    def send():
        _broadcast(user_id, event, {**data, 'badge': badge_for(user)})

    transaction.on_commit(send)


def get_recent(user: User, limit: Optional[int] = None) -> List[Notification]:
    limit = limit or settings.NOTIFICATION_FEED_LIMIT
    limit = min(200, max(1, int(limit)))
    return list(Notification.objects.filter(recipient=user).order_by('-created_at', '-id')[:limit])


def list_notifications(user: User, *, read: Optional[bool] = None, page: int = 1, page_size: int = 20) -> Tuple[List[dict], int]:
    qs = Notification.objects.filter(recipient=user)
    if read is not None:
        qs = qs.filter(read=read)
    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    items = qs.order_by('-created_at', '-id')[start:start + page_size]
    return [serialize(n) for n in items], total


def load_center(user: User, limit: Optional[int] = None) -> NotificationCenter:
    """Project the user's recent notifications into an in-process center."""
    return NotificationCenter(to_record(n) for n in get_recent(user, limit))


@transaction.atomic
def create_notification(recipient: User, message: str, *, title: str = '', type: str = Notification.TYPE_INFO,
                        payload: Optional[dict] = None, created_by: Optional[User] = None) -> Notification:
    message = bleach.clean((message or '').strip(), strip=True)
    title = bleach.clean((title or '').strip(), strip=True)
    if not message:
        raise ValueError('Notification message cannot be empty')
    if type not in dict(Notification.TYPE_CHOICES):
        raise ValueError(f'Unsupported notification type: {type}')

    n = Notification.objects.create(recipient=recipient, title=title, message=message, type=type, payload=payload or {})
    try_log_action(user=created_by, action='notification_create', object_type='notification', object_id=n.id,
                   detail={'recipient': recipient.id})
    _broadcast_on_commit(recipient, EVENT_RECEIVED, {'notification': serialize(n)})
    return n


@transaction.atomic
def mark_as_read(user: User, notification_id: str) -> bool:
    """Mark one of ``user``'s notifications read.

    Unknown ids, ids owned by someone else and already-read rows are a
    no-op returning False; nothing is raised.
    """
    if not notification_id:
        return False
    updated = Notification.objects.filter(recipient=user, id=notification_id, read=False).update(
        read=True, read_at=timezone.now()
    )
    if not updated:
        return False
    try_log_action(user=user, action='notification_read', object_type='notification', object_id=notification_id)
    _broadcast_on_commit(user, EVENT_READ, {'id': notification_id})
    return True


@transaction.atomic
def mark_all_as_read(user: User) -> int:
    updated = Notification.objects.filter(recipient=user, read=False).update(read=True, read_at=timezone.now())
    if updated:
        try_log_action(user=user, action='notification_read_all', object_type='notification',
                       detail={'updated': updated})
        _broadcast_on_commit(user, EVENT_CLEARED, {'updated': updated})
    return updated


@transaction.atomic
def delete_notification(user: User, notification_id: str) -> bool:
    if not notification_id:
        return False
    deleted, _ = Notification.objects.filter(recipient=user, id=notification_id).delete()
    if not deleted:
        return False
    try_log_action(user=user, action='notification_delete', object_type='notification', object_id=notification_id)
    _broadcast_on_commit(user, EVENT_DELETED, {'id': notification_id})
    return True
