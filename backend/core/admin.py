from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "report", "event_type", "new_status", "is_read", "created_at")
    list_filter = ("event_type", "is_read")
    raw_id_fields = ("recipient", "report", "chat_message")
