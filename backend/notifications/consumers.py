"""
Websocket consumer for realtime notifications.

Clients connect to ws/notifications/ with an authenticated session or a
JWT in the query string (see notifications.auth) and receive every
notification pushed to their ``user_<id>`` group.
"""
import logging

from channels.generic.websocket import JsonWebsocketConsumer
from asgiref.sync import async_to_sync

from notifications.service import user_group

logger = logging.getLogger(__name__)


class NotificationConsumer(JsonWebsocketConsumer):
    def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            self.close(code=4401)
            return

        self.group_name = user_group(user.id)
        async_to_sync(self.channel_layer.group_add)(self.group_name, self.channel_name)
        self.accept()
        logger.debug(f"Notification socket opened for user {user.id}")

    def disconnect(self, code):
        group_name = getattr(self, "group_name", None)
        if group_name:
            async_to_sync(self.channel_layer.group_discard)(group_name, self.channel_name)

    def receive_json(self, content, **kwargs):
        if content.get("type") == "ping":
            self.send_json({"type": "pong"})

    def notification_message(self, event):
        self.send_json({"type": "notification", "notification": event["notification"]})
