import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True, verbose_name="Name")),
                ("companies", models.ManyToManyField(blank=True, related_name="categories", to="accounts.company", verbose_name="Servicing Companies")),
                ("office", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="categories", to="accounts.office", verbose_name="Responsible Office")),
            ],
            options={
                "verbose_name": "Category",
                "verbose_name_plural": "Categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Report",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(verbose_name="Description")),
                ("images", models.JSONField(default=list, help_text="List of 1 to 3 image URLs.", verbose_name="Images")),
                ("latitude", models.FloatField(verbose_name="Latitude")),
                ("longitude", models.FloatField(verbose_name="Longitude")),
                ("status", models.CharField(choices=[("PendingApproval", "Pending Approval"), ("Assigned", "Assigned"), ("InProgress", "In Progress"), ("Suspended", "Suspended"), ("Resolved", "Resolved"), ("Rejected", "Rejected")], db_index=True, default="PendingApproval", max_length=20, verbose_name="Status")),
                ("anonymous", models.BooleanField(default=False, help_text="Hide the author on the public map.", verbose_name="Anonymous")),
                ("rejection_reason", models.TextField(blank=True, default="", verbose_name="Rejection Reason")),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="assigned_reports", to=settings.AUTH_USER_MODEL, verbose_name="Assigned Staff Member")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="reports", to="reports.category", verbose_name="Category")),
                ("co_assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="co_assigned_reports", to=settings.AUTH_USER_MODEL, verbose_name="Co-assigned Maintainer")),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_reports", to=settings.AUTH_USER_MODEL, verbose_name="Created By")),
            ],
            options={
                "verbose_name": "Report",
                "verbose_name_plural": "Reports",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["assigned_to", "status"], name="reports_assignee_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(status__in=["PendingApproval", "Rejected"], assigned_to__isnull=True)
                            | (~models.Q(status__in=["PendingApproval", "Rejected"]) & models.Q(assigned_to__isnull=False))
                        ),
                        name="report_assignee_matches_status",
                    ),
                    models.CheckConstraint(
                        condition=(
                            (models.Q(status="Rejected") & ~models.Q(rejection_reason=""))
                            | (~models.Q(status="Rejected") & models.Q(rejection_reason=""))
                        ),
                        name="report_reason_only_when_rejected",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(co_assigned_to__isnull=True) | models.Q(assigned_to__isnull=False),
                        name="report_co_assignee_requires_assignee",
                    ),
                ],
            },
        ),
    ]
