"""
Registry serializers - no business logic, validation only.
"""

from rest_framework import serializers
from apps.registry.models import (
    HEI,
    AcademicYear,
    DocumentRequirement,
    Program,
    RecordStatus,
    Region,
    Semester,
)


class RegionSerializer(serializers.ModelSerializer):
    """Serializer for Region."""

    id = serializers.UUIDField(read_only=True)
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_null=True, allow_blank=True, required=False)
    status = serializers.ChoiceField(choices=RecordStatus.choices, default=RecordStatus.ACTIVE)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Region
        fields = ["id", "code", "name", "description", "status", "createdAt"]


class ProgramSerializer(serializers.ModelSerializer):
    """Serializer for Program."""

    id = serializers.UUIDField(read_only=True)
    code = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_null=True, allow_blank=True, required=False)
    status = serializers.ChoiceField(choices=RecordStatus.choices, default=RecordStatus.ACTIVE)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Program
        fields = ["id", "code", "name", "description", "status", "createdAt"]


class HEISerializer(serializers.ModelSerializer):
    """Serializer for HEI."""

    id = serializers.UUIDField(read_only=True)
    uii = serializers.CharField(max_length=20)
    code = serializers.CharField(max_length=50, allow_null=True, allow_blank=True, required=False)
    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=HEI.TYPE_CHOICES, default="Private")
    regionId = serializers.PrimaryKeyRelatedField(
        source="region",
        queryset=Region.objects.all(),
        allow_null=True,
        required=False,
    )
    region = serializers.StringRelatedField(read_only=True)
    status = serializers.ChoiceField(choices=RecordStatus.choices, default=RecordStatus.ACTIVE)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = HEI
        fields = [
            "id",
            "uii",
            "code",
            "name",
            "type",
            "regionId",
            "region",
            "status",
            "createdAt",
        ]


class SemesterSerializer(serializers.ModelSerializer):
    """Serializer for Semester."""

    id = serializers.UUIDField(read_only=True)
    code = serializers.CharField(max_length=10)
    name = serializers.CharField(max_length=100)
    sortOrder = serializers.IntegerField(source="sort_order", min_value=0, default=0)
    isActive = serializers.BooleanField(source="is_active", default=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Semester
        fields = ["id", "code", "name", "sortOrder", "isActive", "createdAt"]


class AcademicYearSerializer(serializers.ModelSerializer):
    """Serializer for AcademicYear."""

    id = serializers.UUIDField(read_only=True)
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)
    startDate = serializers.DateField(source="start_date", allow_null=True, required=False)
    endDate = serializers.DateField(source="end_date", allow_null=True, required=False)
    isActive = serializers.BooleanField(source="is_active", default=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = AcademicYear
        fields = ["id", "code", "name", "startDate", "endDate", "isActive", "createdAt"]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"endDate": "Must be after startDate"})
        return attrs


class DocumentRequirementSerializer(serializers.ModelSerializer):
    """Serializer for DocumentRequirement."""

    id = serializers.UUIDField(read_only=True)
    programId = serializers.PrimaryKeyRelatedField(
        source="program", queryset=Program.objects.all()
    )
    program = serializers.StringRelatedField(read_only=True)
    code = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_null=True, allow_blank=True, required=False)
    referenceImagePath = serializers.CharField(
        source="reference_image_path",
        max_length=500,
        allow_null=True,
        allow_blank=True,
        required=False,
    )
    uploadMessage = serializers.CharField(
        source="upload_message", allow_null=True, allow_blank=True, required=False
    )
    sortOrder = serializers.IntegerField(source="sort_order", min_value=0, default=0)
    isActive = serializers.BooleanField(source="is_active", default=True)
    isRequired = serializers.BooleanField(source="is_required", default=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = DocumentRequirement
        fields = [
            "id",
            "programId",
            "program",
            "code",
            "name",
            "description",
            "referenceImagePath",
            "uploadMessage",
            "sortOrder",
            "isActive",
            "isRequired",
            "createdAt",
        ]
