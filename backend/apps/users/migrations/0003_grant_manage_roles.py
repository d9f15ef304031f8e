# Databases seeded before role management existed lack the manage_roles grant.

from django.db import migrations

from apps.users.roles import grant_permission


def grant_manage_roles(apps, schema_editor):
    Role = apps.get_model("users", "Role")
    Permission = apps.get_model("users", "Permission")
    grant_permission(Role, Permission, "manage_roles", ("Super Admin", "Admin"))


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0002_seed_default_roles"),
    ]

    operations = [
        migrations.RunPython(grant_manage_roles, migrations.RunPython.noop),
    ]
