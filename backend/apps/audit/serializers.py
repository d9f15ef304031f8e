"""
Serializers for AuditEntry model.
"""

from rest_framework import serializers
from apps.audit.models import AuditEntry


class AuditEntrySerializer(serializers.ModelSerializer):
    """Serializer for AuditEntry."""

    id = serializers.UUIDField(read_only=True)
    action = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    actorId = serializers.UUIDField(source="actor_id", read_only=True, allow_null=True)
    actorName = serializers.CharField(source="actor_name", read_only=True)
    subjectType = serializers.SerializerMethodField()
    subjectId = serializers.CharField(source="subject_id", read_only=True, allow_null=True)
    subjectLabel = serializers.CharField(
        source="subject_label", read_only=True, allow_null=True
    )
    module = serializers.CharField(read_only=True, allow_null=True)
    oldValues = serializers.JSONField(source="old_values", read_only=True, allow_null=True)
    newValues = serializers.JSONField(source="new_values", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = AuditEntry
        fields = [
            "id",
            "action",
            "description",
            "actorId",
            "actorName",
            "subjectType",
            "subjectId",
            "subjectLabel",
            "module",
            "oldValues",
            "newValues",
            "createdAt",
        ]

    def get_subjectType(self, obj):
        # "registry.HEI" -> "HEI"
        if not obj.subject_type:
            return None
        return obj.subject_type.rsplit(".", 1)[-1]
