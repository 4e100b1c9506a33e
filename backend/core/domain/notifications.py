"""
core.domain.notifications — Synchronous notification creation helper.

Centralises notification creation so every app uses one consistent
entry-point rather than directly constructing ``Notification`` objects.

Design decisions
----------------
* **Creation only** — delivery (push, e-mail) is handled elsewhere; this
  module only records the event for the recipient.
* **Two payload kinds** — a status change carries ``previous_status`` /
  ``new_status``; a chat message carries a ``chat_message`` reference.
* **Called after commit** — the report services invoke these methods once
  the report transaction is durable, so a failure here never rolls back
  the status change.

Usage::

    from core.domain.notifications import NotificationService

    NotificationService.emit_status_change(
        recipient_id=report.created_by_id,
        report_id=report.pk,
        previous_status="PendingApproval",
        new_status="Assigned",
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chats.models import Message
    from core.models import Notification

logger = logging.getLogger(__name__)

# ── Event-type → human-readable templates ───────────────────────────
_EVENT_TEMPLATES: dict[str, tuple[str, str]] = {
    # event_type: (title_template, body_template)
    "status_changed": (
        "Report Status Updated",
        "Your report #{report_id} moved from {previous_status} to {new_status}.",
    ),
    "new_message": (
        "New Message",
        "You have a new message about report #{report_id}.",
    ),
}


class NotificationService:
    """
    Stateless helper for creating ``Notification`` records.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def _render(cls, event_type: str, **context) -> tuple[str, str]:
        title, body = _EVENT_TEMPLATES[event_type]
        return title, body.format(**context)

    @classmethod
    def emit_status_change(
        cls,
        *,
        recipient_id: int,
        report_id: int,
        previous_status: str,
        new_status: str,
    ) -> Notification:
        """
        Record one status-change notification for ``recipient_id``.

        Returns:
            The created ``Notification``.
        """
        from core.models import Notification, NotificationEvent

        title, body = cls._render(
            NotificationEvent.STATUS_CHANGED,
            report_id=report_id,
            previous_status=previous_status,
            new_status=new_status,
        )
        notification = Notification.objects.create(
            recipient_id=recipient_id,
            report_id=report_id,
            event_type=NotificationEvent.STATUS_CHANGED,
            previous_status=previous_status,
            new_status=new_status,
            title=title,
            body=body,
        )
        logger.info(
            "Notification #%s [status_changed %s -> %s] for user=%s report=%s",
            notification.pk,
            previous_status,
            new_status,
            recipient_id,
            report_id,
        )
        return notification

    @classmethod
    def emit_message(cls, *, recipient_id: int, message: Message) -> Notification:
        """Record a notification pointing at a freshly sent chat message."""
        from core.models import Notification, NotificationEvent

        report_id = message.chat.report_id
        title, body = cls._render(NotificationEvent.NEW_MESSAGE, report_id=report_id)
        notification = Notification.objects.create(
            recipient_id=recipient_id,
            report_id=report_id,
            event_type=NotificationEvent.NEW_MESSAGE,
            chat_message=message,
            title=title,
            body=body,
        )
        logger.info(
            "Notification #%s [new_message] for user=%s report=%s",
            notification.pk,
            recipient_id,
            report_id,
        )
        return notification
