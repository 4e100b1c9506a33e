"""
Reports app Service Layer.

This module is the **single source of truth** for the report lifecycle.
Views must remain thin: validate input via serializers, call a service
method, and return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``CategoryDirectoryService``     — Category lookups.
- ``ReportQueryService``           — Read-only report listings and detail.
- ``ReportCreationService``        — Citizen report submission.
- ``StaffRoutingService``          — Least-loaded routing of accepted reports.
- ``ReportWorkflowService``        — Status transitions (review + staff updates).
- ``ReportCoAssignmentService``    — External maintainer co-assignment.
- ``ReportCategoryService``        — Category correction by reviewers.

Every mutation follows the same shape: all input and authorization
checks, then ``transaction.atomic()`` with the report row locked, then
the write, then the side effects (chat provisioning, notifications) once
the report is committed.  A failing side effect never undoes the report
change; it is reported through ``SideEffectFailure``.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import User, UserType
from accounts.services import StaffDirectoryService, UserDirectoryService
from chats.services import ChatProvisioningService
from core.domain.access import require_same_user, require_user_type
from core.domain.exceptions import (
    InvalidTransition,
    NotFound,
    RoutingUnavailable,
    SideEffectFailure,
    ValidationFailed,
)
from core.domain.notifications import NotificationService
from core.domain.transactions import SideEffect, lock_for_update, run_side_effects

from .models import OPEN_STATUSES, Category, Report, ReportStatus

logger = logging.getLogger(__name__)


class TransitionActor:
    """Who may drive a given transition."""

    REVIEWER = "reviewer"
    ASSIGNEE = "assignee"


#: Legal transitions of the report state machine and the actor each needs.
#: Any pair not listed here is an invalid transition; Resolved and
#: Rejected have no outgoing pairs.
ALLOWED_TRANSITIONS: dict[tuple[str, str], str] = {
    (ReportStatus.PENDING_APPROVAL, ReportStatus.ASSIGNED): TransitionActor.REVIEWER,
    (ReportStatus.PENDING_APPROVAL, ReportStatus.REJECTED): TransitionActor.REVIEWER,
    (ReportStatus.ASSIGNED, ReportStatus.IN_PROGRESS): TransitionActor.ASSIGNEE,
    (ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED): TransitionActor.ASSIGNEE,
    (ReportStatus.IN_PROGRESS, ReportStatus.SUSPENDED): TransitionActor.ASSIGNEE,
    (ReportStatus.SUSPENDED, ReportStatus.IN_PROGRESS): TransitionActor.ASSIGNEE,
}

REVIEW_TARGETS = (ReportStatus.ASSIGNED, ReportStatus.REJECTED)

REVIEWER_TYPES = (UserType.PUBLIC_RELATIONS_OFFICER, UserType.ADMINISTRATOR)

MIN_IMAGES = 1
MAX_IMAGES = 3


def _parse_status(value: Any, *, field: str = "status") -> str:
    if value not in ReportStatus.values:
        raise ValidationFailed(
            f"'{value}' is not a valid report status. "
            f"Choose one of: {', '.join(ReportStatus.values)}.",
            field=field,
        )
    return value


def _report_queryset() -> QuerySet[Report]:
    return Report.objects.select_related(
        "category",
        "category__office",
        "created_by",
        "assigned_to",
        "co_assigned_to",
    )


def _reload(report_id: int) -> Report:
    return _report_queryset().get(pk=report_id)


def _finish(report_id: int, effects: Sequence[SideEffect]) -> Report:
    """
    Run ``effects`` after the report transaction committed and return the
    fresh report, or raise ``SideEffectFailure`` carrying it.
    """
    failed = run_side_effects(effects)
    report = _reload(report_id)
    if failed:
        raise SideEffectFailure(report=report, failed_effects=failed)
    return report


def _status_notification(report: Report, previous_status: str) -> SideEffect:
    return (
        "notification",
        lambda: NotificationService.emit_status_change(
            recipient_id=report.created_by_id,
            report_id=report.pk,
            previous_status=previous_status,
            new_status=report.status,
        ),
    )


# ═══════════════════════════════════════════════════════════════════
#  Category Directory
# ═══════════════════════════════════════════════════════════════════


class CategoryDirectoryService:

    @staticmethod
    def find_by_id(category_id: int | None) -> Category | None:
        if category_id is None:
            return None
        return Category.objects.select_related("office").filter(pk=category_id).first()

    @staticmethod
    def get_by_id(category_id: int | None) -> Category:
        category = CategoryDirectoryService.find_by_id(category_id)
        if category is None:
            raise NotFound(f"Category with id {category_id} not found.")
        return category

    @staticmethod
    def list_categories() -> QuerySet[Category]:
        return Category.objects.select_related("office").order_by("name")


# ═══════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════


class ReportQueryService:
    """
    Read-only access to reports.

    Every queryset is fully loaded (category, office and the three user
    relations) so serializers never trigger extra queries per row.
    """

    @staticmethod
    def list_by_status(status: Any, requesting_user_id: int) -> QuerySet[Report]:
        """
        Reports currently in ``status``.  Reviewers only.

        Raises:
            ValidationFailed: ``status`` is not a ``ReportStatus`` value.
            PermissionDenied: The requester is not a PRO or administrator.
        """
        status = _parse_status(status)
        requester = UserDirectoryService.get_by_id(requesting_user_id)
        require_user_type(requester, *REVIEWER_TYPES)
        return _report_queryset().filter(status=status)

    @staticmethod
    def list_mine(user_id: int) -> QuerySet[Report]:
        return _report_queryset().filter(created_by_id=user_id)

    @staticmethod
    def get_by_id(report_id: int, requestor_id: int) -> Report:
        """
        Detail view of a single report, visible to its creator only.

        Raises:
            NotFound: No report with ``report_id``.
            PermissionDenied: ``requestor_id`` did not create the report.
        """
        report = _report_queryset().filter(pk=report_id).first()
        if report is None:
            raise NotFound(f"Report with id {report_id} not found.")
        require_same_user(
            requestor_id,
            report.created_by_id,
            "Only the creator of a report can view its details.",
        )
        return report

    @staticmethod
    def list_assigned_to(staff_id: int) -> QuerySet[Report]:
        return _report_queryset().filter(assigned_to_id=staff_id)

    @staticmethod
    def list_co_assigned_to(maintainer_id: int) -> QuerySet[Report]:
        return _report_queryset().filter(co_assigned_to_id=maintainer_id)

    @staticmethod
    def list_public_map() -> QuerySet[Report]:
        """Reports that passed review, for the public map."""
        return _report_queryset().filter(
            status__in=(*OPEN_STATUSES, ReportStatus.RESOLVED),
        )


# ═══════════════════════════════════════════════════════════════════
#  Creation
# ═══════════════════════════════════════════════════════════════════


class ReportCreationService:
    """Submission of new reports by citizens."""

    @staticmethod
    def _validate_text(value: Any, field: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationFailed(f"'{field}' must be a non-empty string.", field=field)
        return value.strip()

    @staticmethod
    def _validate_images(images: Any) -> list[str]:
        if not isinstance(images, (list, tuple)):
            raise ValidationFailed("'images' must be a list of URLs.", field="images")
        if not MIN_IMAGES <= len(images) <= MAX_IMAGES:
            raise ValidationFailed(
                f"A report needs between {MIN_IMAGES} and {MAX_IMAGES} images.",
                field="images",
            )
        cleaned = []
        for url in images:
            if not isinstance(url, str) or not url.strip():
                raise ValidationFailed("Image URLs cannot be blank.", field="images")
            cleaned.append(url.strip())
        return cleaned

    @staticmethod
    def _validate_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
        bounds = settings.REPORT_BOUNDS
        checks = (
            ("latitude", latitude, bounds["min_lat"], bounds["max_lat"]),
            ("longitude", longitude, bounds["min_long"], bounds["max_long"]),
        )
        for field, value, low, high in checks:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationFailed(f"'{field}' must be a number.", field=field)
            if not low <= value <= high:
                raise ValidationFailed(
                    f"'{field}' must be between {low} and {high}.",
                    field=field,
                )
        return float(latitude), float(longitude)

    @staticmethod
    def create_report(
        creator_id: int,
        *,
        title: Any,
        description: Any,
        category_id: int,
        images: Any,
        latitude: Any,
        longitude: Any,
        anonymous: bool = False,
    ) -> Report:
        """
        Create a report in ``PendingApproval``.

        Raises:
            NotFound: Unknown creator or category.
            PermissionDenied: The creator is not a citizen.
            ValidationFailed: Blank title/description, wrong number of
                images, or coordinates outside ``settings.REPORT_BOUNDS``.
        """
        creator = UserDirectoryService.get_by_id(creator_id)
        require_user_type(
            creator,
            UserType.CITIZEN,
            message="Only citizens can submit reports.",
        )

        title = ReportCreationService._validate_text(title, "title")
        description = ReportCreationService._validate_text(description, "description")
        images = ReportCreationService._validate_images(images)
        latitude, longitude = ReportCreationService._validate_coordinates(latitude, longitude)
        category = CategoryDirectoryService.get_by_id(category_id)

        report = Report.objects.create(
            title=title,
            description=description,
            category=category,
            images=images,
            latitude=latitude,
            longitude=longitude,
            anonymous=bool(anonymous),
            created_by=creator,
            status=ReportStatus.PENDING_APPROVAL,
        )
        logger.info(
            "Report #%s created by user=%s in category=%s",
            report.pk, creator.pk, category.pk,
        )
        return _reload(report.pk)


# ═══════════════════════════════════════════════════════════════════
#  Routing
# ═══════════════════════════════════════════════════════════════════


class StaffRoutingService:
    """
    Picks the technical staff member who takes over an accepted report.

    The policy is least-loaded: among the active staff of the office that
    owns the report's category, the one with the fewest open reports wins,
    ties going to the lowest user id.
    """

    @staticmethod
    def pick_assignee(category_id: int) -> User:
        """
        Must run inside the transaction that writes the assignment; the
        candidate staff rows stay locked until it commits.

        Raises:
            RoutingUnavailable: The category has no office, or the office
                has no active technical staff.
        """
        category = CategoryDirectoryService.get_by_id(category_id)
        if category.office_id is None:
            raise RoutingUnavailable(
                f"Category '{category.name}' is misconfigured: it has no responsible office."
            )

        staff = StaffDirectoryService.least_loaded_staff_for_office(
            category.office_id,
            lock=True,
        )
        if staff is None:
            raise RoutingUnavailable(
                f"No staff available in office '{category.office.name}'."
            )
        return staff


# ═══════════════════════════════════════════════════════════════════
#  Workflow
# ═══════════════════════════════════════════════════════════════════


class ReportWorkflowService:
    """
    Status transitions of a report.

    ``accept_or_reject`` covers the reviewer rows of ``ALLOWED_TRANSITIONS``
    and ``update_status`` the assignee rows; neither can drive the other's
    transitions.
    """

    @staticmethod
    def _check_transition(report: Report, target: str, actor: str) -> None:
        if ALLOWED_TRANSITIONS.get((report.status, target)) != actor:
            raise InvalidTransition(
                current=report.status,
                target=target,
                reason=(
                    f"{report.status} is a terminal status"
                    if report.is_terminal
                    else None
                ),
            )

    @staticmethod
    def accept_or_reject(
        report_id: int,
        target_status: Any,
        requesting_user_id: int,
        rejection_reason: str | None = "",
    ) -> Report:
        """
        Review a pending report.

        Accepting routes it to the least-loaded staff member of the
        category's office, then (after commit) provisions the
        citizen↔staff chat and notifies the creator.  Rejecting records
        the reason and notifies the creator.

        Raises:
            ValidationFailed: Target is not Assigned/Rejected, or a
                rejection has no reason.
            NotFound: Unknown reviewer or report.
            PermissionDenied: The reviewer is not a PRO or administrator.
            InvalidTransition: The report is no longer pending.
            RoutingUnavailable: Nobody can take over the report.
            SideEffectFailure: The review was committed but the chat or
                the notification could not be created.
        """
        target = _parse_status(target_status)
        if target not in REVIEW_TARGETS:
            raise ValidationFailed(
                "A review can only move a report to Assigned or Rejected.",
                field="status",
            )
        reason = (rejection_reason or "").strip()
        if target == ReportStatus.REJECTED and not reason:
            raise ValidationFailed(
                "A rejection reason is required.",
                field="rejection_reason",
            )

        reviewer = UserDirectoryService.get_by_id(requesting_user_id)
        require_user_type(reviewer, *REVIEWER_TYPES)

        with transaction.atomic():
            report = lock_for_update(Report, report_id)
            ReportWorkflowService._check_transition(report, target, TransitionActor.REVIEWER)

            previous_status = report.status
            if target == ReportStatus.ASSIGNED:
                assignee = StaffRoutingService.pick_assignee(report.category_id)
                report.assigned_to = assignee
            else:
                report.rejection_reason = reason
            report.status = target
            report.save(update_fields=[
                "status", "assigned_to", "rejection_reason", "updated_at",
            ])

        logger.info(
            "Report #%s reviewed by user=%s: %s -> %s (assignee=%s)",
            report.pk, reviewer.pk, previous_status, target, report.assigned_to_id,
        )

        effects: list[SideEffect] = []
        if target == ReportStatus.ASSIGNED:
            effects.append((
                "chat",
                lambda: ChatProvisioningService.ensure_chat(
                    report.pk, report.assigned_to_id, report.created_by_id,
                ),
            ))
        effects.append(_status_notification(report, previous_status))
        return _finish(report.pk, effects)

    @staticmethod
    def update_status(report_id: int, target_status: Any, acting_staff_id: int) -> Report:
        """
        Move an assigned report through its work states.

        Raises:
            ValidationFailed: Unknown target status.
            NotFound: Unknown report.
            InvalidTransition: Not an assignee transition from the current
                status (terminal statuses have none).
            PermissionDenied: The caller is not the report's assignee.
            SideEffectFailure: The status changed but the creator could
                not be notified.
        """
        target = _parse_status(target_status)

        with transaction.atomic():
            report = lock_for_update(Report, report_id)
            ReportWorkflowService._check_transition(report, target, TransitionActor.ASSIGNEE)
            require_same_user(
                acting_staff_id,
                report.assigned_to_id,
                "You are not assigned to this report.",
            )

            previous_status = report.status
            report.status = target
            report.save(update_fields=["status", "updated_at"])

        logger.info(
            "Report #%s moved %s -> %s by staff=%s",
            report.pk, previous_status, target, acting_staff_id,
        )
        return _finish(report.pk, [_status_notification(report, previous_status)])


# ═══════════════════════════════════════════════════════════════════
#  Co-assignment
# ═══════════════════════════════════════════════════════════════════


class ReportCoAssignmentService:

    @staticmethod
    def assign_external_maintainer(
        report_id: int,
        acting_staff_id: int,
        maintainer_id: int,
    ) -> Report:
        """
        Hand an assigned report over to an external maintainer.

        The previous co-assignee, if any, is replaced.  The status does not
        change, so no notification is sent; the staff↔maintainer chat is
        provisioned after commit.

        Raises:
            NotFound: Unknown report or maintainer.
            PermissionDenied: The caller is not the report's assignee.
            ValidationFailed: The target user is not an external maintainer.
            InvalidTransition: The report is resolved.
            SideEffectFailure: Co-assigned, but the chat could not be created.
        """
        with transaction.atomic():
            report = lock_for_update(Report, report_id)
            require_same_user(
                acting_staff_id,
                report.assigned_to_id,
                "You are not assigned to this report.",
            )
            maintainer = UserDirectoryService.get_by_id(maintainer_id)
            if maintainer.user_type != UserType.EXTERNAL_MAINTAINER:
                raise ValidationFailed(
                    f"User {maintainer.pk} is not an external maintainer.",
                    field="maintainer_id",
                )
            if report.status not in OPEN_STATUSES:
                raise InvalidTransition(
                    f"A {report.status} report cannot be co-assigned.",
                    current=report.status,
                    target=report.status,
                )

            report.co_assigned_to = maintainer
            report.save(update_fields=["co_assigned_to", "updated_at"])

        logger.info(
            "Report #%s co-assigned to maintainer=%s by staff=%s",
            report.pk, maintainer.pk, acting_staff_id,
        )
        return _finish(report.pk, [(
            "chat",
            lambda: ChatProvisioningService.ensure_chat(
                report.pk, report.assigned_to_id, maintainer.pk,
            ),
        )])


# ═══════════════════════════════════════════════════════════════════
#  Category correction
# ═══════════════════════════════════════════════════════════════════


class ReportCategoryService:

    @staticmethod
    @transaction.atomic
    def update_category(report_id: int, category_id: int, requesting_user_id: int) -> Report:
        """
        Correct the category of a report that is not yet resolved or
        rejected.  Status, assignee, chats and notifications are left
        untouched; an already routed report is not re-routed.
        """
        reviewer = UserDirectoryService.get_by_id(requesting_user_id)
        require_user_type(reviewer, *REVIEWER_TYPES)
        category = CategoryDirectoryService.get_by_id(category_id)

        report = lock_for_update(Report, report_id)
        if report.is_terminal:
            raise InvalidTransition(
                f"The category of a {report.status} report cannot be changed.",
                current=report.status,
                target=report.status,
            )

        previous_category_id = report.category_id
        report.category = category
        report.save(update_fields=["category", "updated_at"])

        logger.info(
            "Report #%s recategorised %s -> %s by user=%s",
            report.pk, previous_category_id, category.pk, reviewer.pk,
        )
        return _reload(report.pk)
