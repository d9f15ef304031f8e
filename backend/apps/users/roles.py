"""
Default roles and permissions.

seed_default_roles() takes the model classes as arguments so data
migrations can run it against historical models.
"""

PERMISSIONS = {
    # name: (module, description)
    "manage_users": ("Users", "Create, edit, delete and toggle users"),
    "manage_roles": ("Roles", "Create, edit and delete roles and their permissions"),
    "manage_registry": ("Registry", "Maintain regions, programs, HEIs and reference data"),
    "view_activity_logs": ("Activity Logs", "View the activity log"),
    "view_liquidation": ("Liquidation", "View liquidation reports"),
    "view_all_liquidations": ("Liquidation", "View liquidation reports of every HEI"),
    "create_liquidation": ("Liquidation", "Create liquidation reports"),
    "edit_liquidation": ("Liquidation", "Edit and submit liquidation reports"),
    "delete_liquidation": ("Liquidation", "Delete draft liquidation reports"),
    "review_liquidation": ("Liquidation", "Endorse to accounting or return to HEI"),
    "accounting_review": ("Liquidation", "Endorse to COA or return to regional coordinator"),
}

ROLE_PERMISSIONS = {
    "Super Admin": tuple(PERMISSIONS),
    "Admin": (
        "manage_users",
        "manage_roles",
        "manage_registry",
        "view_activity_logs",
        "view_liquidation",
        "view_all_liquidations",
    ),
    "Regional Coordinator": (
        "view_liquidation",
        "create_liquidation",
        "edit_liquidation",
        "review_liquidation",
    ),
    "Accountant": (
        "view_liquidation",
        "view_all_liquidations",
        "accounting_review",
    ),
    "HEI": (
        "view_liquidation",
        "create_liquidation",
        "edit_liquidation",
        "delete_liquidation",
    ),
}


def seed_default_roles(role_model, permission_model):
    """Create missing default permissions and roles. Existing grants are kept."""
    permissions = {}
    for name, (module, description) in PERMISSIONS.items():
        permissions[name], _ = permission_model.objects.get_or_create(
            name=name, defaults={"module": module, "description": description}
        )

    for role_name, granted in ROLE_PERMISSIONS.items():
        role, created = role_model.objects.get_or_create(name=role_name)
        if created:
            role.permissions.set([permissions[name] for name in granted])


def grant_permission(role_model, permission_model, permission_name, role_names):
    """Add one default permission to existing roles, keeping their other grants."""
    module, description = PERMISSIONS[permission_name]
    permission, _ = permission_model.objects.get_or_create(
        name=permission_name, defaults={"module": module, "description": description}
    )
    for role in role_model.objects.filter(name__in=role_names):
        role.permissions.add(permission)
