"""
Activity log profiles for registry master data.
"""

from apps.audit.profiles import AuditProfile, register, related_display


def register_profiles():
    from apps.registry.models import (
        HEI,
        AcademicYear,
        DocumentRequirement,
        Program,
        Region,
        Semester,
    )

    register(Region, AuditProfile(module="Regions"))
    register(Program, AuditProfile(module="Programs"))
    register(
        HEI,
        AuditProfile(
            module="HEI",
            model_label="HEI",
            field_labels={"uii": "UII", "region_id": "Region"},
            foreign_keys={"region_id": related_display(Region, "name")},
        ),
    )
    register(
        DocumentRequirement,
        AuditProfile(
            module="Document Requirements",
            field_labels={"program_id": "Program"},
            hidden_fields=("reference_image_path",),
            foreign_keys={"program_id": related_display(Program, "name")},
        ),
    )
    register(Semester, AuditProfile(module="Semesters"))
    register(AcademicYear, AuditProfile(module="Academic Years"))
