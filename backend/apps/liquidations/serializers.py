"""
Liquidation serializers - no business logic, validation only.
"""

from rest_framework import serializers
from apps.liquidations.models import Liquidation, LiquidationBeneficiary
from apps.registry.models import HEI, Program, Semester


class LiquidationBeneficiarySerializer(serializers.ModelSerializer):
    """Serializer for LiquidationBeneficiary."""

    id = serializers.UUIDField(read_only=True)
    studentNo = serializers.CharField(source="student_no", max_length=50)
    lastName = serializers.CharField(source="last_name", max_length=100)
    firstName = serializers.CharField(source="first_name", max_length=100)
    middleName = serializers.CharField(
        source="middle_name", max_length=100, required=False, allow_null=True, allow_blank=True
    )
    extensionName = serializers.CharField(
        source="extension_name", max_length=20, required=False, allow_null=True, allow_blank=True
    )
    awardNo = serializers.CharField(
        source="award_no", max_length=100, required=False, allow_null=True, allow_blank=True
    )
    dateDisbursed = serializers.DateField(source="date_disbursed", required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, default=0)
    remarks = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = LiquidationBeneficiary
        fields = [
            "id",
            "studentNo",
            "lastName",
            "firstName",
            "middleName",
            "extensionName",
            "awardNo",
            "dateDisbursed",
            "amount",
            "remarks",
            "fullName",
            "createdAt",
        ]


class LiquidationSerializer(serializers.ModelSerializer):
    """Serializer for Liquidation."""

    id = serializers.UUIDField(read_only=True)
    controlNo = serializers.CharField(source="control_no", max_length=100)
    heiId = serializers.PrimaryKeyRelatedField(source="hei", queryset=HEI.objects.all())
    hei = serializers.CharField(source="hei.name", read_only=True)
    programId = serializers.PrimaryKeyRelatedField(
        source="program", queryset=Program.objects.all()
    )
    program = serializers.CharField(source="program.name", read_only=True)
    semesterId = serializers.PrimaryKeyRelatedField(
        source="semester", queryset=Semester.objects.all(), required=False, allow_null=True
    )
    semester = serializers.SerializerMethodField()
    academicYear = serializers.CharField(source="academic_year", max_length=20)
    batchNo = serializers.CharField(
        source="batch_no", max_length=100, required=False, allow_null=True, allow_blank=True
    )
    amountReceived = serializers.DecimalField(
        source="amount_received", max_digits=15, decimal_places=2, min_value=0, default=0
    )
    amountLiquidated = serializers.DecimalField(
        source="amount_liquidated", max_digits=15, decimal_places=2, read_only=True
    )
    status = serializers.CharField(read_only=True)
    dateSubmitted = serializers.DateTimeField(source="date_submitted", read_only=True)
    remarks = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    createdBy = serializers.UUIDField(source="created_by_id", read_only=True)
    reviewedAt = serializers.DateTimeField(source="reviewed_at", read_only=True)
    accountantReviewedAt = serializers.DateTimeField(
        source="accountant_reviewed_at", read_only=True
    )
    coaEndorsedAt = serializers.DateTimeField(source="coa_endorsed_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Liquidation
        fields = [
            "id",
            "controlNo",
            "heiId",
            "hei",
            "programId",
            "program",
            "semesterId",
            "semester",
            "academicYear",
            "batchNo",
            "amountReceived",
            "amountLiquidated",
            "status",
            "dateSubmitted",
            "remarks",
            "createdBy",
            "reviewedAt",
            "accountantReviewedAt",
            "coaEndorsedAt",
            "createdAt",
            "updatedAt",
        ]

    def get_semester(self, obj):
        return obj.semester.name if obj.semester_id else None


class LiquidationDetailSerializer(LiquidationSerializer):
    """Liquidation with its beneficiaries."""

    beneficiaries = LiquidationBeneficiarySerializer(many=True, read_only=True)

    class Meta(LiquidationSerializer.Meta):
        fields = LiquidationSerializer.Meta.fields + ["beneficiaries"]


class WorkflowActionSerializer(serializers.Serializer):
    """Body of workflow action endpoints."""

    remarks = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class BeneficiaryImportRowSerializer(serializers.Serializer):
    """One row of a JSON beneficiary import. Values are validated by the service."""

    studentNo = serializers.CharField(source="student_no", required=False, allow_blank=True, default="")
    lastName = serializers.CharField(source="last_name", required=False, allow_blank=True, default="")
    firstName = serializers.CharField(source="first_name", required=False, allow_blank=True, default="")
    middleName = serializers.CharField(
        source="middle_name", required=False, allow_blank=True, allow_null=True, default=""
    )
    extensionName = serializers.CharField(
        source="extension_name", required=False, allow_blank=True, allow_null=True, default=""
    )
    awardNo = serializers.CharField(
        source="award_no", required=False, allow_blank=True, allow_null=True, default=""
    )
    dateDisbursed = serializers.CharField(
        source="date_disbursed", required=False, allow_blank=True, allow_null=True, default=""
    )
    amount = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
