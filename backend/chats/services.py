"""
Chats app Service Layer.

- ``ChatProvisioningService`` — idempotent find-or-create of a report chat.
- ``ChatQueryService``        — chats visible to a participant.
- ``MessageService``          — reading and sending messages.

``ensure_chat`` has no authorization of its own: it is only called by the
report services, after they authorized the acting user.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from accounts.models import User, UserType
from accounts.services import UserDirectoryService
from core.domain.exceptions import NotFound, PermissionDenied, ValidationFailed
from core.domain.notifications import NotificationService
from reports.models import Report

from .models import Chat, ChatType, Message

logger = logging.getLogger(__name__)

#: Chat type by the user type of the non-staff participant.
CHAT_TYPE_BY_SECOND_PARTY: dict[str, str] = {
    UserType.CITIZEN: ChatType.CITIZEN_STAFF,
    UserType.EXTERNAL_MAINTAINER: ChatType.MAINTAINER_STAFF,
}


def _chat_queryset() -> QuerySet[Chat]:
    return Chat.objects.select_related("report", "staff_user", "second_user")


# ═══════════════════════════════════════════════════════════════════
#  Provisioning
# ═══════════════════════════════════════════════════════════════════


class ChatProvisioningService:

    @staticmethod
    def _split_participants(party_a: User, party_b: User) -> tuple[User, User]:
        """Return ``(staff_side, second_party)``."""
        staff = [p for p in (party_a, party_b) if p.user_type == UserType.TECHNICAL_STAFF_MEMBER]
        if len(staff) != 1:
            raise ValidationFailed(
                "A report chat needs exactly one technical staff participant."
            )
        staff_user = staff[0]
        second_user = party_b if staff_user is party_a else party_a
        if second_user.user_type not in CHAT_TYPE_BY_SECOND_PARTY:
            raise ValidationFailed(
                f"Users of type '{second_user.user_type}' cannot take part in a report chat."
            )
        return staff_user, second_user

    @staticmethod
    def find_chat(report_id: int, user_a_id: int, user_b_id: int) -> Chat | None:
        """Existing chat of ``report_id`` between the two users, in either order."""
        return _chat_queryset().filter(
            Q(staff_user_id=user_a_id, second_user_id=user_b_id)
            | Q(staff_user_id=user_b_id, second_user_id=user_a_id),
            report_id=report_id,
        ).first()

    @staticmethod
    def ensure_chat(report_id: int, party_a_id: int, party_b_id: int) -> Chat:
        """
        Return the chat of ``report_id`` between the two parties, creating
        it on first use.  Calling it again never creates a second row.

        The unique constraint on (report, staff_user, second_user) settles
        concurrent creators: the loser's insert fails inside its savepoint
        and it returns the winner's row instead.

        Raises:
            NotFound: Unknown report or user.
            ValidationFailed: The pair is not staff + citizen/maintainer.
        """
        if not Report.objects.filter(pk=report_id).exists():
            raise NotFound(f"Report with id {report_id} not found.")
        staff_user, second_user = ChatProvisioningService._split_participants(
            UserDirectoryService.get_by_id(party_a_id),
            UserDirectoryService.get_by_id(party_b_id),
        )

        chat = ChatProvisioningService.find_chat(report_id, staff_user.pk, second_user.pk)
        if chat is not None:
            return chat

        try:
            with transaction.atomic():
                chat = Chat.objects.create(
                    report_id=report_id,
                    staff_user=staff_user,
                    second_user=second_user,
                    chat_type=CHAT_TYPE_BY_SECOND_PARTY[second_user.user_type],
                )
        except IntegrityError:
            logger.info(
                "Chat for report=%s users=%s/%s created concurrently; re-reading",
                report_id, staff_user.pk, second_user.pk,
            )
            chat = ChatProvisioningService.find_chat(report_id, staff_user.pk, second_user.pk)
            if chat is None:
                raise
            return chat

        logger.info(
            "Chat #%s (%s) created for report=%s between staff=%s and user=%s",
            chat.pk, chat.chat_type, report_id, staff_user.pk, second_user.pk,
        )
        return chat


# ═══════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════


class ChatQueryService:

    @staticmethod
    def list_for_user(user_id: int) -> QuerySet[Chat]:
        return _chat_queryset().filter(
            Q(staff_user_id=user_id) | Q(second_user_id=user_id),
        )

    @staticmethod
    def list_for_report(report_id: int, user_id: int) -> QuerySet[Chat]:
        """
        Chats of a report that ``user_id`` takes part in.

        Raises ``NotFound`` for an unknown report and ``PermissionDenied``
        when the user is not involved in the report at all.
        """
        report = Report.objects.filter(pk=report_id).first()
        if report is None:
            raise NotFound(f"Report with id {report_id} not found.")
        involved = (report.created_by_id, report.assigned_to_id, report.co_assigned_to_id)
        if user_id not in involved:
            raise PermissionDenied("You are not involved in this report.")
        return ChatQueryService.list_for_user(user_id).filter(report_id=report_id)

    @staticmethod
    def get_for_participant(chat_id: int, user_id: int) -> Chat:
        chat = _chat_queryset().filter(pk=chat_id).first()
        if chat is None:
            raise NotFound(f"Chat with id {chat_id} not found.")
        if not chat.has_participant(user_id):
            raise PermissionDenied("You are not a participant of this chat.")
        return chat


# ═══════════════════════════════════════════════════════════════════
#  Messages
# ═══════════════════════════════════════════════════════════════════


class MessageService:

    @staticmethod
    def list_messages(chat_id: int, user_id: int) -> QuerySet[Message]:
        chat = ChatQueryService.get_for_participant(chat_id, user_id)
        return chat.messages.select_related("sender", "receiver")

    @staticmethod
    @transaction.atomic
    def send_message(chat_id: int, sender_id: int, text: str) -> Message:
        """
        Post ``text`` to a chat and notify the other participant.

        Raises:
            ValidationFailed: Blank text.
            NotFound: Unknown chat.
            PermissionDenied: The sender is not a participant.
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationFailed("A message cannot be empty.", field="text")
        chat = ChatQueryService.get_for_participant(chat_id, sender_id)

        message = Message.objects.create(
            chat=chat,
            sender_id=sender_id,
            receiver_id=chat.other_participant_id(sender_id),
            text=text.strip(),
        )
        NotificationService.emit_message(recipient_id=message.receiver_id, message=message)

        logger.info(
            "Message #%s sent in chat=%s by user=%s",
            message.pk, chat.pk, sender_id,
        )
        return message
