"""
Accounts app Service Layer.

Directory lookups used by the report lifecycle:

- ``UserDirectoryService``        — Users by id.
- ``StaffDirectoryService``       — Technical staff by office, with open-report load.
- ``MaintainerDirectoryService``  — External maintainers able to service a category.

The report services never query ``User`` directly; they go through these
directories, which return fully-loaded model instances.
"""

from __future__ import annotations

import logging

from django.db.models import Count, Q, QuerySet

from core.domain.access import require_user_type
from core.domain.exceptions import NotFound
from reports.models import OPEN_STATUSES, Category, Report

from .models import User, UserType

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  User Directory
# ═══════════════════════════════════════════════════════════════════


class UserDirectoryService:
    """Lookup of arbitrary users by id."""

    @staticmethod
    def find_by_id(user_id: int | None) -> User | None:
        if user_id is None:
            return None
        return User.objects.select_related("company").filter(pk=user_id).first()

    @staticmethod
    def get_by_id(user_id: int | None) -> User:
        """Like ``find_by_id`` but raises ``NotFound`` when absent."""
        user = UserDirectoryService.find_by_id(user_id)
        if user is None:
            raise NotFound(f"User with id {user_id} not found.")
        return user


# ═══════════════════════════════════════════════════════════════════
#  Staff Directory
# ═══════════════════════════════════════════════════════════════════


class StaffDirectoryService:
    """
    Technical staff lookups with their current open-report load.

    "Open" means assigned to the staff member and not yet terminal
    (``Assigned``, ``InProgress`` or ``Suspended``).
    """

    @staticmethod
    def staff_for_office(office_id: int) -> QuerySet[User]:
        """Active technical staff members of the given office."""
        return User.objects.filter(
            user_type=UserType.TECHNICAL_STAFF_MEMBER,
            is_active=True,
            offices__id=office_id,
        )

    @staticmethod
    def with_open_load(queryset: QuerySet[User]) -> QuerySet[User]:
        """Annotate ``open_reports`` on each user of ``queryset``."""
        return queryset.annotate(
            open_reports=Count(
                "assigned_reports",
                filter=Q(assigned_reports__status__in=OPEN_STATUSES),
                distinct=True,
            ),
        )

    @staticmethod
    def least_loaded_staff_for_office(office_id: int, *, lock: bool = False) -> User | None:
        """
        Return the staff member of ``office_id`` with the fewest open
        reports, or ``None`` when the office has no active staff.

        Ties are broken by the lowest user id, so repeated calls against
        the same data always pick the same person.

        With ``lock=True`` the candidate rows are locked first (the caller
        must be inside ``transaction.atomic()``); concurrent routings into
        the same office then wait for this transaction, so the load read
        here stays valid until the assignment is committed.
        """
        candidates = StaffDirectoryService.staff_for_office(office_id)
        if lock:
            list(
                candidates.select_for_update(of=("self",))
                .order_by("pk")
                .values_list("pk", flat=True)
            )

        staff = (
            StaffDirectoryService.with_open_load(candidates)
            .order_by("open_reports", "pk")
            .first()
        )
        if staff is not None:
            logger.debug(
                "Least-loaded staff for office=%s is user=%s (%s open reports)",
                office_id,
                staff.pk,
                staff.open_reports,
            )
        return staff

    @staticmethod
    def open_report_count(staff_id: int) -> int:
        """Number of non-terminal reports currently assigned to ``staff_id``."""
        return Report.objects.filter(
            assigned_to_id=staff_id,
            status__in=OPEN_STATUSES,
        ).count()

    @staticmethod
    def list_technical_staff(requesting_user: User, office_id: int | None = None) -> QuerySet[User]:
        """
        All technical staff with their open load, optionally restricted to
        one office.  Only PROs and administrators may see staff load.
        """
        require_user_type(
            requesting_user,
            UserType.PUBLIC_RELATIONS_OFFICER,
            UserType.ADMINISTRATOR,
        )
        qs = User.objects.filter(user_type=UserType.TECHNICAL_STAFF_MEMBER)
        if office_id is not None:
            qs = qs.filter(offices__id=office_id)
        return (
            StaffDirectoryService.with_open_load(qs)
            .prefetch_related("offices")
            .order_by("pk")
        )


# ═══════════════════════════════════════════════════════════════════
#  Maintainer Directory
# ═══════════════════════════════════════════════════════════════════


class MaintainerDirectoryService:
    """External maintainers grouped by the categories their company services."""

    @staticmethod
    def list_for_category(category_id: int | None = None) -> QuerySet[User]:
        """
        External maintainers, optionally restricted to those whose company
        services ``category_id``.

        Raises ``NotFound`` if the category does not exist.
        """
        qs = User.objects.filter(
            user_type=UserType.EXTERNAL_MAINTAINER,
            is_active=True,
        ).select_related("company")

        if category_id is not None:
            if not Category.objects.filter(pk=category_id).exists():
                raise NotFound(f"Category with id {category_id} not found.")
            qs = qs.filter(company__categories__id=category_id).distinct()

        return qs.order_by("pk")
