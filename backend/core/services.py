"""
Core app services — **Service Layer**.

Contains the notification inbox and the system-constants lookup.  Views
delegate all business logic to the service classes defined here.

Cross-app models are imported **inside** the methods that need them so the
core app never imports other apps at module load time.
"""

from __future__ import annotations

from typing import Any

from django.db.models import QuerySet

from core.domain.exceptions import NotFound

from .models import Notification


# ═══════════════════════════════════════════════════════════════════
#  Notification Inbox Service
# ═══════════════════════════════════════════════════════════════════


class NotificationInboxService:
    """
    Handles listing and marking notifications as seen for a given user.
    """

    def __init__(self, user: Any) -> None:
        self.user = user

    def list_notifications(self, *, unread_only: bool = False) -> QuerySet[Notification]:
        """Return the notifications of ``self.user``, most recent first."""
        qs = (
            Notification.objects
            .filter(recipient=self.user)
            .select_related("report", "chat_message")
            .order_by("-created_at", "-id")
        )
        if unread_only:
            qs = qs.filter(is_read=False)
        return qs

    def mark_as_read(self, notification_id: int) -> Notification:
        """
        Mark a single notification as seen.

        Only the recipient can mark its own notification; any other id is
        reported as not found.
        """
        try:
            notification = Notification.objects.get(
                pk=notification_id,
                recipient=self.user,
            )
        except Notification.DoesNotExist:
            raise NotFound(f"Notification with id {notification_id} not found.")

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return notification


# ═══════════════════════════════════════════════════════════════════
#  System Constants Service
# ═══════════════════════════════════════════════════════════════════


class SystemConstantsService:
    """
    Exposes the system's choice enumerations so the frontend can build
    dropdowns and badges without hard-coding values.
    """

    @staticmethod
    def _choices(choices_cls: Any) -> list[dict[str, str]]:
        return [
            {"value": value, "label": label}
            for value, label in choices_cls.choices
        ]

    @classmethod
    def get_constants(cls) -> dict[str, list[dict[str, str]]]:
        from accounts.models import UserType
        from chats.models import ChatType
        from reports.models import ReportStatus

        return {
            "report_statuses": cls._choices(ReportStatus),
            "user_types": cls._choices(UserType),
            "chat_types": cls._choices(ChatType),
        }
