"""
Notification inbox API. Notifications are per user and not tenant-scoped.
"""
from django.shortcuts import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor
from notifications.models import Notification
from notifications.serializers import NotificationSerializer


class NotificationListView(APIView):
    """
    GET /api/notifications/    ?unread=1 for unread only
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        notifications = Notification.objects.filter(user=actor.user)
        if request.query_params.get("unread") in ("1", "true"):
            notifications = notifications.unread()
        return Response(NotificationSerializer(notifications[:100], many=True).data)


class NotificationReadView(APIView):
    """
    POST /api/notifications/<pk>/read/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        notification = get_object_or_404(Notification, pk=pk, user=actor.user)
        notification.mark_read()
        return Response(NotificationSerializer(notification).data)


class NotificationReadAllView(APIView):
    """
    POST /api/notifications/read-all/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        updated = Notification.objects.filter(user=actor.user).mark_read()
        return Response({"updated": updated})


class UnreadCountView(APIView):
    """
    GET /api/notifications/unread-count/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        return Response({"unread": Notification.objects.filter(user=actor.user).unread().count()})
