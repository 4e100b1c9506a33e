import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("reports", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Chat",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("chat_type", models.CharField(choices=[("citizen_staff", "Citizen ↔ Staff"), ("maintainer_staff", "Maintainer ↔ Staff")], max_length=20, verbose_name="Chat Type")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="chats", to="reports.report", verbose_name="Report")),
                ("second_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participant_chats", to=settings.AUTH_USER_MODEL, verbose_name="Second Participant")),
                ("staff_user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="staff_chats", to=settings.AUTH_USER_MODEL, verbose_name="Staff Member")),
            ],
            options={
                "verbose_name": "Chat",
                "verbose_name_plural": "Chats",
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("report", "staff_user", "second_user"), name="unique_chat_per_report_pair"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("text", models.TextField(verbose_name="Text")),
                ("chat", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="chats.chat", verbose_name="Chat")),
                ("receiver", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="received_messages", to=settings.AUTH_USER_MODEL, verbose_name="Receiver")),
                ("sender", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sent_messages", to=settings.AUTH_USER_MODEL, verbose_name="Sender")),
            ],
            options={
                "verbose_name": "Message",
                "verbose_name_plural": "Messages",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
