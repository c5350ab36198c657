"""
Create notifications and push them to connected websocket clients.

Every user's sockets join the channel group ``user_<id>``; a push is a
``notification.message`` event carrying the serialized notification.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from notifications.models import Notification

logger = logging.getLogger(__name__)


def user_group(user_id: int) -> str:
    return f"user_{user_id}"


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "type": notification.notification_type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data,
        "read": notification.is_read,
        "created_at": notification.created_at.isoformat(),
    }


def push_to_user(notification: Notification) -> bool:
    """Send a notification to the user's open sockets. Returns False if no layer is configured."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False

    async_to_sync(channel_layer.group_send)(
        user_group(notification.user_id),
        {
            "type": "notification.message",
            "notification": serialize_notification(notification),
        },
    )
    return True


def notify(user_id: int, notification_type: str, title: str, message: str = "", data: dict | None = None) -> Notification:
    """
    Store a notification and push it.

    A push failure is logged; the stored row is still delivered on the
    next list call.
    """
    notification = Notification.objects.create(
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        message=message,
        data=data or {},
    )
    try:
        push_to_user(notification)
    except Exception as e:
        logger.warning(f"Realtime push failed for notification {notification.id}: {e}")
    return notification
