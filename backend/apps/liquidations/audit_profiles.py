"""
Activity log profiles for liquidations and their beneficiaries.
"""

from apps.audit.profiles import AuditProfile, register, related_display

LIQUIDATION_MODULE = "Liquidation"


def register_profiles():
    from apps.liquidations.models import Liquidation, LiquidationBeneficiary
    from apps.registry.models import HEI, Program, Semester

    register(
        Liquidation,
        AuditProfile(
            module=LIQUIDATION_MODULE,
            field_labels={
                "hei_id": "HEI",
                "program_id": "Program",
                "semester_id": "Semester",
                "control_no": "Control No.",
                "academic_year": "Academic Year",
                "batch_no": "Batch No.",
                "date_submitted": "Date Submitted",
                "remarks": "Remarks",
            },
            hidden_fields=(
                "created_by_id",
                "reviewed_by_id",
                "reviewed_at",
                "accountant_reviewed_by_id",
                "accountant_reviewed_at",
                "coa_endorsed_by_id",
                "coa_endorsed_at",
            ),
            foreign_keys={
                "hei_id": related_display(HEI, "name"),
                "program_id": related_display(Program, "name"),
                "semester_id": related_display(Semester, "name"),
            },
        ),
    )
    register(
        LiquidationBeneficiary,
        AuditProfile(
            module=LIQUIDATION_MODULE,
            label_fields=("student_no", "last_name"),
            hidden_fields=("liquidation_id",),
        ),
    )
