import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("chats", "0001_initial"),
        ("reports", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("event_type", models.CharField(choices=[("status_changed", "Status Changed"), ("new_message", "New Message")], max_length=20, verbose_name="Event Type")),
                ("previous_status", models.CharField(blank=True, default="", max_length=20, verbose_name="Previous Status")),
                ("new_status", models.CharField(blank=True, default="", max_length=20, verbose_name="New Status")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("body", models.TextField(verbose_name="Body")),
                ("is_read", models.BooleanField(default=False, verbose_name="Seen")),
                ("chat_message", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="chats.message", verbose_name="Chat Message")),
                ("recipient", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL, verbose_name="Recipient")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="reports.report", verbose_name="Report")),
            ],
            options={
                "verbose_name": "Notification",
                "verbose_name_plural": "Notifications",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["recipient", "is_read"], name="core_notif_recipient_read_idx"),
                ],
            },
        ),
    ]
