"""
Reports app models.

A citizen files a ``Report`` against a ``Category``.  The category's owning
``Office`` decides which technical staff can be assigned once a PRO accepts
the report; the category's ``companies`` decide which external maintainers
can be co-assigned.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ReportStatus(models.TextChoices):
    """Lifecycle status of a report."""

    PENDING_APPROVAL = "PendingApproval", "Pending Approval"
    ASSIGNED = "Assigned", "Assigned"
    IN_PROGRESS = "InProgress", "In Progress"
    SUSPENDED = "Suspended", "Suspended"
    RESOLVED = "Resolved", "Resolved"
    REJECTED = "Rejected", "Rejected"


#: Statuses counted as workload for the assigned staff member.
OPEN_STATUSES = (
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.SUSPENDED,
)

#: No transition leaves these.
TERMINAL_STATUSES = (
    ReportStatus.RESOLVED,
    ReportStatus.REJECTED,
)

#: Statuses in which a report never has an assignee.
UNASSIGNED_STATUSES = (
    ReportStatus.PENDING_APPROVAL,
    ReportStatus.REJECTED,
)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Category(models.Model):
    """
    Kind of problem a report describes (e.g. "Roads and Urban Furnishings").

    A category without an ``office`` cannot be routed: accepting a report
    in it fails until an administrator fixes the configuration.
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name="Name",
    )
    office = models.ForeignKey(
        "accounts.Office",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="categories",
        verbose_name="Responsible Office",
    )
    companies = models.ManyToManyField(
        "accounts.Company",
        blank=True,
        related_name="categories",
        verbose_name="Servicing Companies",
    )

    class Meta:
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Report(TimeStampedModel):
    """
    A citizen's report about a problem in the municipality.

    Created in ``PendingApproval`` and afterwards mutated only through the
    workflow services in ``reports.services``.  Reports are never deleted.
    """

    title = models.CharField(max_length=255, verbose_name="Title")
    description = models.TextField(verbose_name="Description")
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="reports",
        verbose_name="Category",
    )
    images = models.JSONField(
        default=list,
        verbose_name="Images",
        help_text="List of 1 to 3 image URLs.",
    )
    latitude = models.FloatField(verbose_name="Latitude")
    longitude = models.FloatField(verbose_name="Longitude")
    status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        default=ReportStatus.PENDING_APPROVAL,
        db_index=True,
        verbose_name="Status",
    )
    anonymous = models.BooleanField(
        default=False,
        verbose_name="Anonymous",
        help_text="Hide the author on the public map.",
    )
    rejection_reason = models.TextField(
        blank=True,
        default="",
        verbose_name="Rejection Reason",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_reports",
        verbose_name="Created By",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="assigned_reports",
        verbose_name="Assigned Staff Member",
    )
    co_assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="co_assigned_reports",
        verbose_name="Co-assigned Maintainer",
    )

    class Meta:
        verbose_name = "Report"
        verbose_name_plural = "Reports"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["assigned_to", "status"], name="reports_assignee_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status__in=UNASSIGNED_STATUSES, assigned_to__isnull=True)
                    | (~Q(status__in=UNASSIGNED_STATUSES) & Q(assigned_to__isnull=False))
                ),
                name="report_assignee_matches_status",
            ),
            models.CheckConstraint(
                condition=(
                    (Q(status=ReportStatus.REJECTED) & ~Q(rejection_reason=""))
                    | (~Q(status=ReportStatus.REJECTED) & Q(rejection_reason=""))
                ),
                name="report_reason_only_when_rejected",
            ),
            models.CheckConstraint(
                condition=Q(co_assigned_to__isnull=True) | Q(assigned_to__isnull=False),
                name="report_co_assignee_requires_assignee",
            ),
        ]

    def __str__(self):
        return f"Report #{self.pk} — {self.title} [{self.get_status_display()}]"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def clean(self):
        super().clean()
        errors = {}
        if self.status in UNASSIGNED_STATUSES and self.assigned_to_id is not None:
            errors["assigned_to"] = f"A {self.status} report cannot have an assignee."
        if self.status not in UNASSIGNED_STATUSES and self.assigned_to_id is None:
            errors["assigned_to"] = f"A {self.status} report must have an assignee."
        if self.status == ReportStatus.REJECTED and not self.rejection_reason.strip():
            errors["rejection_reason"] = "A rejected report needs a reason."
        if self.status != ReportStatus.REJECTED and self.rejection_reason:
            errors["rejection_reason"] = "Only rejected reports carry a reason."
        if errors:
            raise ValidationError(errors)
