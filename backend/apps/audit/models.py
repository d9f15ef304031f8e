"""
AuditEntry model - immutable chronological record of record lifecycle events
and workflow actions (the activity log).

Audit entries are append-only. No update or delete operations.
"""

import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditAction(models.TextChoices):
    CREATED = "created", "Created"
    UPDATED = "updated", "Updated"
    DELETED = "deleted", "Deleted"


class AuditEntryQuerySet(models.QuerySet):
    """Read helpers for the activity log; bulk writes are refused."""

    def update(self, **kwargs):
        raise ValueError("AuditEntry rows are append-only. Updates are not allowed.")

    def delete(self):
        raise ValueError("AuditEntry rows are append-only. Deletions are not allowed.")

    def for_subject(self, subject_type, subject_id):
        return self.filter(subject_type=subject_type, subject_id=str(subject_id))

    def for_actor(self, actor_id):
        return self.filter(actor_id=actor_id)

    def for_action(self, action):
        return self.filter(action=action)

    def for_module(self, module):
        return self.filter(module=module)

    def between(self, date_from=None, date_to=None):
        qs = self
        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)
        return qs

    def search(self, term):
        return self.filter(
            models.Q(description__icontains=term)
            | models.Q(actor_name__icontains=term)
            | models.Q(subject_label__icontains=term)
        )

    def newest_first(self):
        return self.order_by("-created_at", "-id")


class AuditEntry(models.Model):
    """AuditEntry model - immutable activity log row."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    actor = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    actor_name = models.CharField(max_length=255, default="System")
    action = models.CharField(max_length=50)
    description = models.CharField(max_length=500)
    subject_type = models.CharField(max_length=100, null=True, blank=True)
    subject_id = models.CharField(max_length=64, null=True, blank=True)
    subject_label = models.CharField(max_length=255, null=True, blank=True)
    module = models.CharField(max_length=50, null=True, blank=True)
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, null=True, blank=True)
    request_id = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditEntryQuerySet.as_manager()

    class Meta:
        db_table = "activity_logs"
        indexes = [
            models.Index(fields=["subject_type", "subject_id"], name="idx_activity_subject"),
            models.Index(fields=["created_at"], name="idx_activity_created"),
            models.Index(fields=["actor"], name="idx_activity_actor"),
            models.Index(fields=["action"], name="idx_activity_action"),
            models.Index(fields=["module"], name="idx_activity_module"),
        ]
        ordering = ["-created_at", "-id"]
        verbose_name = "activity log entry"
        verbose_name_plural = "activity log"

    def __str__(self):
        return f"{self.action} - {self.subject_type}:{self.subject_id} at {self.created_at}"

    def save(self, *args, **kwargs):
        """Override save to prevent updates."""
        if not self._state.adding:
            raise ValueError("AuditEntry rows are append-only. Updates are not allowed.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Override delete to prevent deletion."""
        raise ValueError("AuditEntry rows are append-only. Deletions are not allowed.")
