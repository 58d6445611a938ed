import pytest
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from core.models import User
from core.realtime.consumers import NotificationConsumer
from core.services import notifications as feed

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


def _connect(user):
    communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
    communicator.scope["user"] = user
    return communicator


@database_sync_to_async
def _make_user(username, roles):
    return User.objects.create_user(username=username, password="P@ssw0rd1", roles=roles)


async def test_anonymous_connection_is_rejected():
    communicator = _connect(AnonymousUser())
    connected, _ = await communicator.connect()
    assert connected is False


async def test_welcome_frame_carries_badge():
    user = await _make_user("ws_nurse", ["nurse"])
    await database_sync_to_async(feed.create_notification)(user, "Ward 4 above 90%")
    communicator = _connect(user)
    connected, _ = await communicator.connect()
    assert connected
    welcome = await communicator.receive_json_from()
    assert welcome == {"type": "welcome", "badge": {"unreadCount": 1, "hasUnread": True, "display": "1"}}
    await communicator.disconnect()


async def test_new_notification_and_read_events_are_pushed():
    user = await _make_user("ws_doc", ["doctor"])
    communicator = _connect(user)
    await communicator.connect()
    await communicator.receive_json_from()  # welcome

    n = await database_sync_to_async(feed.create_notification)(user, "Bed 3B-12 assigned")
    event = await communicator.receive_json_from()
    assert event["type"] == "event"
    assert event["event"] == feed.EVENT_RECEIVED
    assert event["notification"]["id"] == n.id
    assert event["badge"]["unreadCount"] == 1

    await communicator.send_json_to({"type": "markRead", "id": n.id})
    # the read event and the ack may arrive in either order
    frames = [await communicator.receive_json_from(), await communicator.receive_json_from()]
    by_type = {f["type"]: f for f in frames}
    assert by_type["ack"]["updated"] == 1
    assert by_type["event"]["event"] == feed.EVENT_READ
    assert by_type["event"]["badge"]["unreadCount"] == 0

    # second mark is a no-op: only an ack, no event
    await communicator.send_json_to({"type": "markRead", "id": n.id})
    ack = await communicator.receive_json_from()
    assert ack == {"type": "ack", "ok": True, "updated": 0}
    assert await communicator.receive_nothing()
    await communicator.disconnect()


async def test_unsupported_message_type():
    user = await _make_user("ws_rec", ["reception"])
    communicator = _connect(user)
    await communicator.connect()
    await communicator.receive_json_from()
    await communicator.send_json_to({"type": "subscribe"})
    error = await communicator.receive_json_from()
    assert error["type"] == "error"
    assert error["message"] == "unsupported_type"
    await communicator.disconnect()
