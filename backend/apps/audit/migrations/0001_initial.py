# Activity log entries are append-only immutable records of record
# lifecycle events and workflow actions.

import uuid
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditEntry",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("actor_name", models.CharField(default="System", max_length=255)),
                ("action", models.CharField(max_length=50)),
                ("description", models.CharField(max_length=500)),
                ("subject_type", models.CharField(blank=True, max_length=100, null=True)),
                ("subject_id", models.CharField(blank=True, max_length=64, null=True)),
                ("subject_label", models.CharField(blank=True, max_length=255, null=True)),
                ("module", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "old_values",
                    models.JSONField(blank=True, encoder=DjangoJSONEncoder, null=True),
                ),
                (
                    "new_values",
                    models.JSONField(blank=True, encoder=DjangoJSONEncoder, null=True),
                ),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=255, null=True)),
                ("request_id", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "activity log entry",
                "verbose_name_plural": "activity log",
                "db_table": "activity_logs",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["subject_type", "subject_id"], name="idx_activity_subject"
                    ),
                    models.Index(fields=["created_at"], name="idx_activity_created"),
                    models.Index(fields=["actor"], name="idx_activity_actor"),
                    models.Index(fields=["action"], name="idx_activity_action"),
                    models.Index(fields=["module"], name="idx_activity_module"),
                ],
            },
        ),
    ]
