"""
Core app serializers.

**Response-only** serializers for the notification inbox and the system
constants endpoint.  They do **not** accept input data.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for ``Notification`` instances.

    ``previous_status`` / ``new_status`` are filled for status changes;
    ``chat_message`` for message notifications.
    """

    report_title = serializers.CharField(source="report.title", read_only=True)
    seen = serializers.BooleanField(source="is_read", read_only=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "event_type",
            "report",
            "report_title",
            "previous_status",
            "new_status",
            "chat_message",
            "title",
            "body",
            "seen",
            "created_at",
        ]
        read_only_fields = fields


class NotificationFilterSerializer(serializers.Serializer):
    """Query parameters accepted by the notification list."""

    unread = serializers.BooleanField(
        required=False,
        default=False,
        help_text="Only return notifications not yet seen.",
    )


class ChoiceItemSerializer(serializers.Serializer):
    """A single ``{"value": ..., "label": ...}`` pair."""

    value = serializers.CharField()
    label = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    """Choice enumerations exposed to the frontend."""

    report_statuses = ChoiceItemSerializer(many=True)
    user_types = ChoiceItemSerializer(many=True)
    chat_types = ChoiceItemSerializer(many=True)
