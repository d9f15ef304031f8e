"""
Activity log profiles for user accounts and roles.
"""

from apps.audit.profiles import AuditProfile, register, related_display


def register_profiles():
    from apps.registry.models import HEI, Region
    from apps.users.models import Role, User
    from apps.users.services import ROLE_MODULE, USER_MANAGEMENT_MODULE

    register(
        User,
        AuditProfile(
            module=USER_MANAGEMENT_MODULE,
            field_labels={
                "role_id": "Role",
                "hei_id": "HEI",
                "region_id": "Region",
            },
            foreign_keys={
                "role_id": related_display(Role, "name"),
                "hei_id": related_display(HEI, "name"),
                "region_id": related_display(Region, "name"),
            },
        ),
    )
    register(Role, AuditProfile(module=ROLE_MODULE))
