"""
Core app models.

Provides abstract base models and the ``Notification`` record shared by the
report lifecycle and the chat subsystem.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class NotificationEvent(models.TextChoices):
    """Kind of payload a notification carries."""

    STATUS_CHANGED = "status_changed", "Status Changed"
    NEW_MESSAGE = "new_message", "New Message"


class Notification(TimeStampedModel):
    """
    Notification recorded for a user about one of their reports.

    The payload is either a status-change pair (``previous_status`` /
    ``new_status``) or a reference to a chat message.  Apart from
    ``is_read`` (the "seen" flag) a notification is never modified.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Recipient",
    )
    report = models.ForeignKey(
        "reports.Report",
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Report",
    )
    event_type = models.CharField(
        max_length=20,
        choices=NotificationEvent.choices,
        verbose_name="Event Type",
    )
    previous_status = models.CharField(
        max_length=20,
        blank=True,
        default="",
        verbose_name="Previous Status",
    )
    new_status = models.CharField(
        max_length=20,
        blank=True,
        default="",
        verbose_name="New Status",
    )
    chat_message = models.ForeignKey(
        "chats.Message",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name="Chat Message",
    )
    title = models.CharField(max_length=255, verbose_name="Title")
    body = models.TextField(verbose_name="Body")
    is_read = models.BooleanField(default=False, verbose_name="Seen")

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="core_notif_recipient_read_idx"),
        ]

    def __str__(self):
        return f"[{self.recipient}] {self.title}"
