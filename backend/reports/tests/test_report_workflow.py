"""
Service-level tests for the report state machine.

Covers ``ReportWorkflowService.accept_or_reject`` and ``update_status``:
legal transitions, terminal statuses, rejection reasons, who may act, and
the assignee / rejection-reason invariants.
"""

from __future__ import annotations

from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError, transaction

from chats.models import Chat, ChatType
from core.domain.exceptions import (
    InvalidTransition,
    NotFound,
    PermissionDenied,
    SideEffectFailure,
    ValidationFailed,
)
from core.models import Notification, NotificationEvent
from reports.models import UNASSIGNED_STATUSES, Report, ReportStatus
from reports.services import (
    ALLOWED_TRANSITIONS,
    ReportWorkflowService,
    TransitionActor,
)

ASSIGNEE_PAIRS = {pair for pair, actor in ALLOWED_TRANSITIONS.items() if actor == TransitionActor.ASSIGNEE}

NON_ASSIGNEE_PAIRS = [
    (current, target)
    for current in ReportStatus.values
    for target in ReportStatus.values
    if (current, target) not in ASSIGNEE_PAIRS
]


def _report_in(report_factory, status: str, staff):
    kwargs = {"status": status}
    if status not in UNASSIGNED_STATUSES:
        kwargs["assigned_to"] = staff
    if status == ReportStatus.REJECTED:
        kwargs["rejection_reason"] = "Duplicate"
    return report_factory(**kwargs)


def _assert_invariants():
    for report in Report.objects.all():
        assert (report.assigned_to_id is not None) == (report.status not in UNASSIGNED_STATUSES)
        assert bool(report.rejection_reason) == (report.status == ReportStatus.REJECTED)


@pytest.mark.django_db
class TestAcceptOrReject:

    def test_accept_routes_to_staff_and_opens_citizen_chat(self, report_factory, pro, citizen, staff_factory):
        staff = staff_factory()
        report = report_factory()

        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.status == ReportStatus.ASSIGNED
        assert updated.assigned_to == staff
        assert updated.rejection_reason == ""
        chat = Chat.objects.get(report=report)
        assert chat.chat_type == ChatType.CITIZEN_STAFF
        assert (chat.staff_user, chat.second_user) == (staff, citizen)
        _assert_invariants()

    def test_accept_notifies_creator(self, report_factory, pro, citizen, staff_factory):
        staff_factory()
        report = report_factory()

        ReportWorkflowService.accept_or_reject(report.pk, "Assigned", pro.pk)

        notification = Notification.objects.get(recipient=citizen)
        assert notification.event_type == NotificationEvent.STATUS_CHANGED
        assert notification.previous_status == ReportStatus.PENDING_APPROVAL
        assert notification.new_status == ReportStatus.ASSIGNED
        assert notification.report_id == report.pk
        assert notification.is_read is False

    def test_reject_records_reason_and_notifies(self, report_factory, pro, citizen):
        report = report_factory()

        updated = ReportWorkflowService.accept_or_reject(
            report.pk, ReportStatus.REJECTED, pro.pk, "  Not a municipal issue  ",
        )

        assert updated.status == ReportStatus.REJECTED
        assert updated.rejection_reason == "Not a municipal issue"
        assert updated.assigned_to is None
        assert not Chat.objects.exists()
        assert Notification.objects.filter(
            recipient=citizen, new_status=ReportStatus.REJECTED,
        ).count() == 1
        _assert_invariants()

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reject_without_reason_writes_nothing(self, report_factory, pro, reason):
        report = report_factory()

        with pytest.raises(ValidationFailed) as exc_info:
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.REJECTED, pro.pk, reason)

        assert exc_info.value.field == "rejection_reason"
        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL
        assert not Notification.objects.exists()

    def test_reject_without_reason_fails_even_for_terminal_report(self, report_factory, pro, staff_factory):
        report = _report_in(report_factory, ReportStatus.RESOLVED, staff_factory())

        with pytest.raises(ValidationFailed):
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.REJECTED, pro.pk, "")

    @pytest.mark.parametrize("target", ["InProgress", "Resolved", "Suspended", "PendingApproval"])
    def test_review_only_accepts_assigned_or_rejected(self, report_factory, pro, target):
        report = report_factory()

        with pytest.raises(ValidationFailed):
            ReportWorkflowService.accept_or_reject(report.pk, target, pro.pk)

    def test_unknown_status_is_validation_failure(self, report_factory, pro):
        report = report_factory()

        with pytest.raises(ValidationFailed):
            ReportWorkflowService.accept_or_reject(report.pk, "Closed", pro.pk)

    def test_citizen_cannot_review(self, report_factory, citizen, staff_factory):
        staff_factory()
        report = report_factory()

        with pytest.raises(PermissionDenied):
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, citizen.pk)

        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL

    def test_administrator_can_review(self, report_factory, create_user, staff_factory):
        from accounts.models import UserType

        admin = create_user(user_type=UserType.ADMINISTRATOR)
        staff_factory()
        report = report_factory()

        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, admin.pk)
        assert updated.status == ReportStatus.ASSIGNED

    def test_unknown_report(self, pro):
        with pytest.raises(NotFound):
            ReportWorkflowService.accept_or_reject(999999, ReportStatus.ASSIGNED, pro.pk)

    def test_second_accept_is_invalid_and_keeps_assignee(self, report_factory, pro, staff_factory):
        first = staff_factory()
        staff_factory()
        report = report_factory()
        ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        with pytest.raises(InvalidTransition) as exc_info:
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert exc_info.value.current == ReportStatus.ASSIGNED
        assert exc_info.value.target == ReportStatus.ASSIGNED
        report.refresh_from_db()
        assert report.assigned_to == first
        assert Chat.objects.filter(report=report).count() == 1

    @pytest.mark.parametrize("status", [ReportStatus.RESOLVED, ReportStatus.REJECTED])
    def test_terminal_reports_cannot_be_reviewed(self, report_factory, pro, staff_factory, status):
        report = _report_in(report_factory, status, staff_factory())

        with pytest.raises(InvalidTransition):
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)


@pytest.mark.django_db
class TestUpdateStatus:

    @pytest.mark.parametrize(
        "current,target",
        [
            (ReportStatus.ASSIGNED, ReportStatus.IN_PROGRESS),
            (ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED),
            (ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED),
            (ReportStatus.SUSPENDED, ReportStatus.IN_PROGRESS),
        ],
    )
    def test_assignee_transitions(self, report_factory, staff_factory, citizen, current, target):
        staff = staff_factory()
        report = _report_in(report_factory, current, staff)

        updated = ReportWorkflowService.update_status(report.pk, target, staff.pk)

        assert updated.status == target
        assert updated.assigned_to == staff
        notification = Notification.objects.get(recipient=citizen)
        assert (notification.previous_status, notification.new_status) == (current, target)

    @pytest.mark.parametrize("current,target", NON_ASSIGNEE_PAIRS)
    def test_every_other_pair_is_invalid(self, report_factory, staff_factory, current, target):
        staff = staff_factory()
        report = _report_in(report_factory, current, staff)

        with pytest.raises(InvalidTransition) as exc_info:
            ReportWorkflowService.update_status(report.pk, target, staff.pk)

        assert exc_info.value.current == current
        assert exc_info.value.target == target
        report.refresh_from_db()
        assert report.status == current
        assert not Notification.objects.exists()

    def test_only_the_assignee_can_update(self, report_factory, staff_factory):
        assignee = staff_factory()
        colleague = staff_factory()
        report = _report_in(report_factory, ReportStatus.ASSIGNED, assignee)

        with pytest.raises(PermissionDenied):
            ReportWorkflowService.update_status(report.pk, ReportStatus.IN_PROGRESS, colleague.pk)

        report.refresh_from_db()
        assert report.status == ReportStatus.ASSIGNED

    def test_unknown_target_status(self, report_factory, staff_factory):
        staff = staff_factory()
        report = _report_in(report_factory, ReportStatus.ASSIGNED, staff)

        with pytest.raises(ValidationFailed):
            ReportWorkflowService.update_status(report.pk, "Done", staff.pk)

    def test_resolved_is_final(self, report_factory, staff_factory):
        staff = staff_factory()
        report = _report_in(report_factory, ReportStatus.IN_PROGRESS, staff)
        ReportWorkflowService.update_status(report.pk, ReportStatus.RESOLVED, staff.pk)

        for target in ReportStatus.values:
            with pytest.raises(InvalidTransition):
                ReportWorkflowService.update_status(report.pk, target, staff.pk)

        _assert_invariants()


@pytest.mark.django_db
class TestSideEffectFailures:

    def test_failed_notification_keeps_status_change(self, report_factory, staff_factory):
        staff = staff_factory()
        report = _report_in(report_factory, ReportStatus.ASSIGNED, staff)

        with mock.patch(
            "reports.services.NotificationService.emit_status_change",
            side_effect=DatabaseError("notification store unavailable"),
        ):
            with pytest.raises(SideEffectFailure) as exc_info:
                ReportWorkflowService.update_status(report.pk, ReportStatus.IN_PROGRESS, staff.pk)

        assert exc_info.value.failed_effects == ["notification"]
        assert exc_info.value.report.status == ReportStatus.IN_PROGRESS
        report.refresh_from_db()
        assert report.status == ReportStatus.IN_PROGRESS
        assert not Notification.objects.exists()

    def test_failed_chat_still_notifies(self, report_factory, pro, citizen, staff_factory):
        staff = staff_factory()
        report = report_factory()

        with mock.patch(
            "reports.services.ChatProvisioningService.ensure_chat",
            side_effect=DatabaseError("chat store unavailable"),
        ):
            with pytest.raises(SideEffectFailure) as exc_info:
                ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert exc_info.value.failed_effects == ["chat"]
        assert exc_info.value.report.assigned_to == staff
        assert not Chat.objects.exists()
        assert Notification.objects.filter(recipient=citizen).count() == 1

    def test_unexpected_chat_error_is_reported_and_creator_notified(
        self, report_factory, pro, citizen, staff_factory,
    ):
        staff = staff_factory()
        report = report_factory()

        with mock.patch(
            "reports.services.ChatProvisioningService.ensure_chat",
            side_effect=RuntimeError("chat backend crashed"),
        ):
            with pytest.raises(SideEffectFailure) as exc_info:
                ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert exc_info.value.failed_effects == ["chat"]
        assert exc_info.value.report.status == ReportStatus.ASSIGNED
        assert exc_info.value.report.assigned_to == staff
        assert Notification.objects.filter(recipient=citizen).count() == 1


@pytest.mark.django_db
class TestReportConstraints:

    def test_assigned_report_requires_assignee(self, report_factory):
        with pytest.raises(IntegrityError), transaction.atomic():
            report_factory(status=ReportStatus.ASSIGNED)

    def test_pending_report_cannot_have_assignee(self, report_factory, staff_factory):
        staff = staff_factory()
        with pytest.raises(IntegrityError), transaction.atomic():
            report_factory(assigned_to=staff)

    def test_rejected_report_requires_reason(self, report_factory):
        with pytest.raises(IntegrityError), transaction.atomic():
            report_factory(status=ReportStatus.REJECTED)

    def test_reason_only_on_rejected(self, report_factory):
        with pytest.raises(IntegrityError), transaction.atomic():
            report_factory(rejection_reason="Not relevant")
