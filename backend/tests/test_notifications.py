# tests/test_notifications.py
"""
Tests for the realtime notification socket.

Tests cover:
- Joining the user's group on connect and receiving pushes
- Rejecting anonymous connections
- The ping / pong keepalive
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from notifications.consumers import NotificationConsumer
from notifications.service import user_group


def _socket_user(user_id=42):
    return User(id=user_id, email=f"user{user_id}@gradlink.test", name="Socket User")


async def _open(user):
    communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
    communicator.scope["user"] = user
    connected, code = await communicator.connect()
    return communicator, connected, code


# =============================================================================
# Consumer
# =============================================================================

@pytest.mark.django_db
class TestNotificationConsumer:

    def test_user_group_name(self):
        assert user_group(7) == "user_7"

    def test_push_reaches_user_group(self):
        user = _socket_user()

        async def scenario():
            communicator, connected, _ = await _open(user)
            assert connected
            layer = get_channel_layer()
            await layer.group_send(
                "user_42",
                {"type": "notification.message", "notification": {"id": 1, "title": "New application"}},
            )
            message = await communicator.receive_json_from()
            await communicator.disconnect()
            await layer.flush()
            return message

        message = async_to_sync(scenario)()
        assert message == {"type": "notification", "notification": {"id": 1, "title": "New application"}}

    def test_other_users_pushes_not_delivered(self):
        user = _socket_user(43)

        async def scenario():
            communicator, connected, _ = await _open(user)
            assert connected
            layer = get_channel_layer()
            await layer.group_send("user_99", {"type": "notification.message", "notification": {"id": 2}})
            nothing = await communicator.receive_nothing()
            await communicator.disconnect()
            await layer.flush()
            return nothing

        assert async_to_sync(scenario)() is True

    def test_anonymous_rejected(self):
        async def scenario():
            communicator, connected, code = await _open(AnonymousUser())
            await get_channel_layer().flush()
            return connected, code

        connected, code = async_to_sync(scenario)()
        assert connected is False
        assert code == 4401

    def test_ping_pong(self):
        user = _socket_user(44)

        async def scenario():
            communicator, connected, _ = await _open(user)
            assert connected
            await communicator.send_json_to({"type": "ping"})
            reply = await communicator.receive_json_from()
            await communicator.disconnect()
            await get_channel_layer().flush()
            return reply

        assert async_to_sync(scenario)() == {"type": "pong"}
