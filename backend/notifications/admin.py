from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "notification_type", "title", "read_at", "created_at")
    list_filter = ("notification_type",)
    search_fields = ("title", "user__email")
    raw_id_fields = ("user",)
