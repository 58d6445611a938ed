"""
Notification feed endpoints backing the header bell.

Mark-read operations are forgiving: an id that does not exist (or was
just deleted by another client) still answers 200 with ``updated: 0``.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import feature_permission
from ..serializers.notifications import (
    NotificationCreateSerializer,
    NotificationIdSerializer,
    NotificationListQuerySerializer,
)
from ..services import notifications as feed

User = get_user_model()


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """Recent notifications, newest first.

    Without paging parameters the most recent ``limit`` rows are returned
    together with the badge state; with ``page``/``pageSize`` (or a
    ``read`` filter) a paginated listing is returned instead.
    """
    q = NotificationListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    badge = feed.badge_for(request.user)
    if 'page' in vd or 'pageSize' in vd or vd.get('read') is not None:
        data, total = feed.list_notifications(
            request.user,
            read=vd.get('read'),
            page=vd.get('page', 1),
            page_size=vd.get('pageSize', 20),
        )
        return Response({
            'ok': True,
            'data': data,
            'badge': badge,
            'pagination': {'total': total, 'page': vd.get('page', 1), 'pageSize': vd.get('pageSize', 20)},
        })
    center = feed.load_center(request.user, vd.get('limit'))
    return Response({'ok': True, 'data': [r.as_dict() for r in center.notifications], 'badge': badge})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'ok': True, **feed.badge_for(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read(request):
    s = NotificationIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    changed = feed.mark_as_read(request.user, s.validated_data['id'])
    return Response({'ok': True, 'updated': int(changed), **feed.badge_for(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read_all(request):
    updated = feed.mark_all_as_read(request.user)
    return Response({'ok': True, 'updated': updated, **feed.badge_for(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_delete(request):
    s = NotificationIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    deleted = feed.delete_notification(request.user, s.validated_data['id'])
    return Response({'ok': True, 'deleted': int(deleted), **feed.badge_for(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, feature_permission('sendNotifications')])
def notification_create(request):
    """Administrators: push a notification to a staff member."""
    s = NotificationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        recipient = User.objects.get(id=vd['recipientId'])
    except User.DoesNotExist:
        return Response({'ok': False, 'detail': 'Recipient not found'}, status=404)
    try:
        n = feed.create_notification(
            recipient,
            vd['message'],
            title=vd.get('title', ''),
            type=vd.get('type', 'info'),
            payload=vd.get('payload'),
            created_by=request.user,
        )
    except ValueError as e:
        return Response({'ok': False, 'detail': str(e)}, status=400)
    return Response({'ok': True, 'notification': feed.serialize(n)}, status=201)
