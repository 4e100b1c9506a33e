"""
Accounts app models.

Defines the municipal organisation (``Office``, ``Company``) and a custom
User model that extends Django's ``AbstractUser`` with a ``user_type``.

* Technical staff members belong to one or more offices; a report is routed
  to the staff of the office that owns its category.
* External maintainers belong to a company; a company declares which
  report categories it can service.
"""

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models


class UserType(models.TextChoices):
    """Kind of account, which decides what a user may do with reports."""

    CITIZEN = "CITIZEN", "Citizen"
    TECHNICAL_STAFF_MEMBER = "TECHNICAL_STAFF_MEMBER", "Technical Staff Member"
    EXTERNAL_MAINTAINER = "EXTERNAL_MAINTAINER", "External Maintainer"
    PUBLIC_RELATIONS_OFFICER = "PUBLIC_RELATIONS_OFFICER", "Public Relations Officer"
    ADMINISTRATOR = "ADMINISTRATOR", "Administrator"


class Office(models.Model):
    """A municipal technical office (e.g. "Roads Maintenance")."""

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name="Office Name",
    )

    class Meta:
        verbose_name = "Office"
        verbose_name_plural = "Offices"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Company(models.Model):
    """
    External maintenance company.

    The categories a company can service are declared on
    ``reports.Category.companies`` (reverse accessor ``categories``).
    """

    name = models.CharField(
        max_length=150,
        verbose_name="Company Name",
    )

    class Meta:
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        ordering = ["name"]

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom user model for the municipal reporting platform.

    Each user has exactly one ``user_type``.  Only technical staff carry
    office memberships and only external maintainers carry a company.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    user_type = models.CharField(
        max_length=30,
        choices=UserType.choices,
        default=UserType.CITIZEN,
        db_index=True,
        verbose_name="User Type",
    )
    offices = models.ManyToManyField(
        Office,
        blank=True,
        related_name="staff",
        verbose_name="Offices",
        help_text="Offices a technical staff member works for.",
    )
    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="maintainers",
        verbose_name="Company",
        help_text="Company an external maintainer works for.",
    )

    REQUIRED_FIELDS = ["email", "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_user_type_display()})"

    def clean(self):
        super().clean()
        if self.company_id and self.user_type != UserType.EXTERNAL_MAINTAINER:
            raise ValidationError(
                {"company": "Only external maintainers can belong to a company."}
            )

    # ── Helper predicates for type checks ────────────────────────────

    @property
    def is_citizen(self) -> bool:
        return self.user_type == UserType.CITIZEN

    @property
    def is_technical_staff(self) -> bool:
        return self.user_type == UserType.TECHNICAL_STAFF_MEMBER

    @property
    def is_external_maintainer(self) -> bool:
        return self.user_type == UserType.EXTERNAL_MAINTAINER

    @property
    def is_reviewer(self) -> bool:
        """PROs and administrators triage incoming reports."""
        return self.user_type in (
            UserType.PUBLIC_RELATIONS_OFFICER,
            UserType.ADMINISTRATOR,
        )
