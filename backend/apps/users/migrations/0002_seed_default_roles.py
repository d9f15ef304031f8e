# Seed the default permissions and roles.
# Depends on users.0001_initial to ensure the roles table exists.

from django.db import migrations

from apps.users.roles import seed_default_roles


def seed_roles(apps, schema_editor):
    Role = apps.get_model("users", "Role")
    Permission = apps.get_model("users", "Permission")
    seed_default_roles(Role, Permission)


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_roles, migrations.RunPython.noop),
    ]
