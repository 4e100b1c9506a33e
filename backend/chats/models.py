"""
Chats app models.

A ``Chat`` links two users around one report: the technical staff member
who owns the report (the "staff side") and either the citizen who filed it
or the external maintainer co-assigned to it.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class ChatType(models.TextChoices):
    """Derived from the kind of user on the non-staff side."""

    CITIZEN_STAFF = "citizen_staff", "Citizen ↔ Staff"
    MAINTAINER_STAFF = "maintainer_staff", "Maintainer ↔ Staff"


class Chat(TimeStampedModel):
    """
    Conversation between the staff side and a second participant about a
    report.  At most one chat exists per report and participant pair.
    """

    report = models.ForeignKey(
        "reports.Report",
        on_delete=models.CASCADE,
        related_name="chats",
        verbose_name="Report",
    )
    staff_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_chats",
        verbose_name="Staff Member",
    )
    second_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="participant_chats",
        verbose_name="Second Participant",
    )
    chat_type = models.CharField(
        max_length=20,
        choices=ChatType.choices,
        verbose_name="Chat Type",
    )

    class Meta:
        verbose_name = "Chat"
        verbose_name_plural = "Chats"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["report", "staff_user", "second_user"],
                name="unique_chat_per_report_pair",
            ),
        ]

    def __str__(self):
        return f"Chat #{self.pk} on report #{self.report_id} ({self.get_chat_type_display()})"

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.staff_user_id, self.second_user_id)

    def other_participant_id(self, user_id: int) -> int:
        return self.second_user_id if user_id == self.staff_user_id else self.staff_user_id


class Message(TimeStampedModel):
    """A single chat message.  Messages are never edited."""

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
        verbose_name="Chat",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        verbose_name="Sender",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
        verbose_name="Receiver",
    )
    text = models.TextField(verbose_name="Text")

    class Meta:
        verbose_name = "Message"
        verbose_name_plural = "Messages"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Message #{self.pk} in chat #{self.chat_id}"
