from rest_framework import serializers
from apps.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification (read-only)."""

    actorId = serializers.UUIDField(source="actor_id", read_only=True)
    actorName = serializers.CharField(source="actor_name", read_only=True)
    subjectType = serializers.CharField(source="subject_type", read_only=True)
    subjectId = serializers.CharField(source="subject_id", read_only=True)
    subjectLabel = serializers.CharField(source="subject_label", read_only=True)
    isRead = serializers.BooleanField(source="is_read", read_only=True)
    readAt = serializers.DateTimeField(source="read_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "actorId",
            "actorName",
            "action",
            "description",
            "subjectType",
            "subjectId",
            "subjectLabel",
            "module",
            "isRead",
            "readAt",
            "createdAt",
        ]
        read_only_fields = fields
