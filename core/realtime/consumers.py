import json

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from core.services import notifications as feed


async def _ws_error(ws, code: int, message: str):
    await ws.send(json.dumps({"type": "error", "code": code, "message": message}))


class NotificationConsumer(AsyncWebsocketConsumer):
    """Per-user notification channel.

    Server events (``NotificationReceived``, ``NotificationRead``,
    ``NotificationDeleted``, ``NotificationsCleared``) are relayed as
    ``{"type": "event", "event": ..., ...}``.  Clients may send
    ``{"type": "markRead", "id": ...}`` or ``{"type": "markAllRead"}``.
    """

    async def connect(self):
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            await self.close(code=4001)
            return
        self.user = user
        self.group_name = feed.user_group(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        badge = await sync_to_async(feed.badge_for)(user)
        await self.send(json.dumps({"type": "welcome", "badge": badge}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            data = json.loads(text_data)
        except ValueError:
            await _ws_error(self, 4000, "invalid_json")
            return
        if not isinstance(data, dict):
            await _ws_error(self, 4001, "invalid_payload")
            return

        kind = data.get("type")
        if kind == "markRead":
            changed = await sync_to_async(feed.mark_as_read)(self.user, str(data.get("id") or ""))
            await self.send(json.dumps({"type": "ack", "ok": True, "updated": int(changed)}))
        elif kind == "markAllRead":
            updated = await sync_to_async(feed.mark_all_as_read)(self.user)
            await self.send(json.dumps({"type": "ack", "ok": True, "updated": updated}))
        else:
            await _ws_error(self, 4002, "unsupported_type")

    # group_send handler for {"type": "notification.event", "event": ..., ...}
    async def notification_event(self, event):
        payload = {k: v for k, v in event.items() if k != "type"}
        await self.send(json.dumps({"type": "event", **payload}))
