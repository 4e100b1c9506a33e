"""
Least-loaded routing of accepted reports.

The staff member of the category's office with the fewest open reports
(Assigned, InProgress, Suspended) takes the report; ties go to the lowest
user id.
"""

from __future__ import annotations

import pytest

from accounts.models import Office, UserType
from accounts.services import StaffDirectoryService
from core.domain.exceptions import RoutingUnavailable
from reports.models import Category, ReportStatus
from reports.services import ReportWorkflowService


@pytest.mark.django_db
class TestLeastLoadedRouting:

    def test_least_loaded_staff_gets_the_report(self, report_factory, staff_factory, pro):
        s1 = staff_factory(username="s1")
        s2 = staff_factory(username="s2")
        report_factory(status=ReportStatus.ASSIGNED, assigned_to=s1)
        report_factory(status=ReportStatus.IN_PROGRESS, assigned_to=s1)
        assert StaffDirectoryService.open_report_count(s2.pk) == 0

        report = report_factory()
        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.assigned_to == s2
        assert StaffDirectoryService.open_report_count(s2.pk) == 1
        assert StaffDirectoryService.open_report_count(s1.pk) == 2

    def test_ties_go_to_lowest_id(self, report_factory, staff_factory, pro):
        first = staff_factory()
        second = staff_factory()
        assert first.pk < second.pk

        report = report_factory()
        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.assigned_to == first

    def test_consecutive_accepts_alternate_between_equal_staff(self, report_factory, staff_factory, pro):
        first = staff_factory()
        second = staff_factory()

        assignees = [
            ReportWorkflowService.accept_or_reject(
                report_factory().pk, ReportStatus.ASSIGNED, pro.pk,
            ).assigned_to
            for _ in range(4)
        ]

        assert assignees == [first, second, first, second]

    def test_closed_reports_do_not_count_as_load(self, report_factory, staff_factory, pro):
        busy_in_past = staff_factory()
        busy_now = staff_factory()
        for _ in range(3):
            report_factory(status=ReportStatus.RESOLVED, assigned_to=busy_in_past)
        report_factory(status=ReportStatus.SUSPENDED, assigned_to=busy_now)

        report = report_factory()
        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.assigned_to == busy_in_past

    def test_staff_of_other_offices_and_inactive_staff_are_ignored(self, report_factory, staff_factory, pro):
        other_office = Office.objects.create(name="Public Lighting")
        staff_factory(offices=[other_office])
        staff_factory(is_active=False)
        member = staff_factory()
        report_factory(status=ReportStatus.ASSIGNED, assigned_to=member)

        report = report_factory()
        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.assigned_to == member

    def test_staff_in_several_offices_is_counted_once(self, report_factory, staff_factory, office, pro):
        other_office = Office.objects.create(name="Green Areas")
        multi = staff_factory(offices=[office, other_office])
        single = staff_factory()
        report_factory(status=ReportStatus.ASSIGNED, assigned_to=multi)
        report_factory(status=ReportStatus.ASSIGNED, assigned_to=single)
        report_factory(status=ReportStatus.ASSIGNED, assigned_to=single)

        report = report_factory()
        updated = ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        assert updated.assigned_to == multi


@pytest.mark.django_db
class TestRoutingUnavailable:

    def test_category_without_office(self, report_factory, staff_factory, pro):
        staff_factory()
        orphan = Category.objects.create(name="Unowned Category")
        report = report_factory(category=orphan)

        with pytest.raises(RoutingUnavailable, match="no responsible office"):
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL
        assert report.assigned_to is None

    def test_office_without_staff(self, report_factory, create_user, pro):
        create_user(user_type=UserType.TECHNICAL_STAFF_MEMBER)  # no office
        report = report_factory()

        with pytest.raises(RoutingUnavailable, match="No staff available"):
            ReportWorkflowService.accept_or_reject(report.pk, ReportStatus.ASSIGNED, pro.pk)

        report.refresh_from_db()
        assert report.status == ReportStatus.PENDING_APPROVAL
