"""
Chats app serializers.
"""

from __future__ import annotations

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Chat, Message


class ChatSerializer(serializers.ModelSerializer):
    report_title = serializers.CharField(source="report.title", read_only=True)
    staff_user = UserSummarySerializer(read_only=True)
    second_user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Chat
        fields = [
            "id",
            "report",
            "report_title",
            "chat_type",
            "staff_user",
            "second_user",
            "created_at",
        ]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ["id", "chat", "sender", "receiver", "text", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True, trim_whitespace=False)
