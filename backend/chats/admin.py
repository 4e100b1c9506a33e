from django.contrib import admin

from .models import Chat, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    readonly_fields = ("sender", "receiver", "text", "created_at")
    can_delete = False


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ("id", "report", "chat_type", "staff_user", "second_user", "created_at")
    list_filter = ("chat_type",)
    raw_id_fields = ("report", "staff_user", "second_user")
    inlines = [MessageInline]
