import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("actor_name", models.CharField(max_length=255)),
                ("action", models.CharField(max_length=50)),
                ("description", models.CharField(max_length=500)),
                ("subject_type", models.CharField(blank=True, max_length=100, null=True)),
                ("subject_id", models.CharField(blank=True, max_length=64, null=True)),
                ("subject_label", models.CharField(blank=True, max_length=255, null=True)),
                ("module", models.CharField(blank=True, max_length=50, null=True)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="users.user",
                    ),
                ),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sent_notifications",
                        to="users.user",
                    ),
                ),
            ],
            options={
                "db_table": "notifications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "read_at"], name="idx_notification_user_read"),
                ],
            },
        ),
    ]
