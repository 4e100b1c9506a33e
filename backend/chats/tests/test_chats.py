"""
Chat provisioning, chat visibility and messaging.
"""

from __future__ import annotations

from unittest import mock

import pytest

from accounts.models import UserType
from chats.models import Chat, ChatType, Message
from chats.services import ChatProvisioningService, ChatQueryService, MessageService
from core.domain.exceptions import NotFound, PermissionDenied, ValidationFailed
from core.models import Notification, NotificationEvent
from reports.models import ReportStatus


@pytest.fixture()
def staff(staff_factory):
    return staff_factory(username="tosm")


@pytest.fixture()
def report(report_factory, staff):
    return report_factory(status=ReportStatus.ASSIGNED, assigned_to=staff)


@pytest.mark.django_db
class TestEnsureChat:

    def test_creates_citizen_chat(self, report, staff, citizen):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        assert chat.chat_type == ChatType.CITIZEN_STAFF
        assert chat.staff_user == staff
        assert chat.second_user == citizen

    def test_second_call_returns_first_chat(self, report, staff, citizen):
        first = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)
        second = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        assert second.pk == first.pk
        assert Chat.objects.count() == 1

    def test_pair_order_does_not_matter(self, report, staff, citizen):
        first = ChatProvisioningService.ensure_chat(report.pk, citizen.pk, staff.pk)
        second = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        assert first.staff_user == staff
        assert second.pk == first.pk
        assert Chat.objects.count() == 1

    def test_maintainer_chat_type(self, report, staff, maintainer):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, maintainer.pk)
        assert chat.chat_type == ChatType.MAINTAINER_STAFF

    def test_same_pair_on_another_report_gets_its_own_chat(self, report, report_factory, staff, citizen):
        other = report_factory(status=ReportStatus.ASSIGNED, assigned_to=staff)

        ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)
        ChatProvisioningService.ensure_chat(other.pk, staff.pk, citizen.pk)

        assert Chat.objects.count() == 2

    def test_concurrent_creator_wins(self, report, staff, citizen):
        existing = Chat.objects.create(
            report=report,
            staff_user=staff,
            second_user=citizen,
            chat_type=ChatType.CITIZEN_STAFF,
        )

        # The first lookup misses the row another request just inserted.
        with mock.patch.object(ChatProvisioningService, "find_chat", side_effect=[None, existing]):
            chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        assert chat == existing
        assert Chat.objects.count() == 1

    def test_pair_without_staff_is_rejected(self, report, citizen, maintainer):
        with pytest.raises(ValidationFailed):
            ChatProvisioningService.ensure_chat(report.pk, citizen.pk, maintainer.pk)

    def test_staff_with_pro_is_rejected(self, report, staff, pro):
        with pytest.raises(ValidationFailed):
            ChatProvisioningService.ensure_chat(report.pk, staff.pk, pro.pk)

    def test_unknown_report(self, staff, citizen):
        with pytest.raises(NotFound):
            ChatProvisioningService.ensure_chat(999999, staff.pk, citizen.pk)


@pytest.mark.django_db
class TestChatQueries:

    def test_list_for_user(self, report, staff, citizen, maintainer):
        citizen_chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)
        maintainer_chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, maintainer.pk)

        assert set(ChatQueryService.list_for_user(staff.pk)) == {citizen_chat, maintainer_chat}
        assert list(ChatQueryService.list_for_user(citizen.pk)) == [citizen_chat]

    def test_list_for_report_is_limited_to_involved_users(self, report, staff, citizen, create_user):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        assert list(ChatQueryService.list_for_report(report.pk, citizen.pk)) == [chat]
        with pytest.raises(PermissionDenied):
            ChatQueryService.list_for_report(report.pk, create_user().pk)

    def test_list_for_unknown_report(self, citizen):
        with pytest.raises(NotFound):
            ChatQueryService.list_for_report(999999, citizen.pk)


@pytest.mark.django_db
class TestMessages:

    def test_send_message_notifies_receiver(self, report, staff, citizen):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        message = MessageService.send_message(chat.pk, citizen.pk, " Any news? ")

        assert message.text == "Any news?"
        assert message.receiver == staff
        notification = Notification.objects.get(recipient=staff)
        assert notification.event_type == NotificationEvent.NEW_MESSAGE
        assert notification.chat_message == message
        assert notification.report_id == report.pk
        assert notification.previous_status == ""

    def test_messages_are_listed_oldest_first(self, report, staff, citizen):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)
        first = MessageService.send_message(chat.pk, citizen.pk, "Hello")
        second = MessageService.send_message(chat.pk, staff.pk, "On it")

        assert list(MessageService.list_messages(chat.pk, staff.pk)) == [first, second]

    def test_outsider_cannot_read_or_write(self, report, staff, citizen, create_user):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)
        outsider = create_user(user_type=UserType.TECHNICAL_STAFF_MEMBER)

        with pytest.raises(PermissionDenied):
            MessageService.list_messages(chat.pk, outsider.pk)
        with pytest.raises(PermissionDenied):
            MessageService.send_message(chat.pk, outsider.pk, "Hi")
        assert not Message.objects.exists()

    def test_blank_message(self, report, staff, citizen):
        chat = ChatProvisioningService.ensure_chat(report.pk, staff.pk, citizen.pk)

        with pytest.raises(ValidationFailed):
            MessageService.send_message(chat.pk, citizen.pk, "   ")
        assert not Notification.objects.exists()
