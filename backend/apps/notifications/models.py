"""
Notification model - in-app notice to one user about a workflow action.
"""

import uuid

from django.db import models


class NotificationQuerySet(models.QuerySet):
    def for_user(self, user_id):
        return self.filter(user_id=user_id)

    def unread(self):
        return self.filter(read_at__isnull=True)


class Notification(models.Model):
    """One recipient's copy of a workflow event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        "users.User", on_delete=models.CASCADE, related_name="notifications"
    )
    actor = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_notifications",
    )
    actor_name = models.CharField(max_length=255)
    action = models.CharField(max_length=50)
    description = models.CharField(max_length=500)
    subject_type = models.CharField(max_length=100, null=True, blank=True)
    subject_id = models.CharField(max_length=64, null=True, blank=True)
    subject_label = models.CharField(max_length=255, null=True, blank=True)
    module = models.CharField(max_length=50, null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read_at"], name="idx_notification_user_read"),
        ]

    def __str__(self):
        return f"{self.action} -> {self.user_id}"

    @property
    def is_read(self):
        return self.read_at is not None
