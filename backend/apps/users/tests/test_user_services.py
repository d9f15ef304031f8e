"""
Coverage tests for apps.users.services and the create_super_admin command.
"""

import os
import uuid
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from core.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from apps.audit.context import AuditContext
from apps.audit.models import AuditEntry
from apps.notifications.models import Notification
from apps.registry.models import Region
from apps.users import services as user_services
from apps.users.models import Role, User, UserStatus
from apps.users.roles import PERMISSIONS, ROLE_PERMISSIONS


def _user(role_name=Role.ADMIN, email=None, **extra):
    return User.objects.create_user(
        email=email or f"svc_{uuid.uuid4().hex[:8]}@example.com",
        password="testpass123",
        name="Service User",
        role=Role.objects.get(name=role_name),
        **extra,
    )


class RoleSeedTests(TestCase):
    def test_default_roles_seeded(self):
        for role_name, permission_names in ROLE_PERMISSIONS.items():
            role = Role.objects.get(name=role_name)
            self.assertEqual(
                set(role.permissions.values_list("name", flat=True)), set(permission_names)
            )

    def test_super_admin_holds_every_permission(self):
        role = Role.objects.get(name=Role.SUPER_ADMIN)
        self.assertEqual(role.permissions.count(), len(PERMISSIONS))

    def test_inactive_user_has_no_permissions(self):
        user = _user(status=UserStatus.INACTIVE)
        self.assertFalse(user.has_permission("manage_users"))

    def test_user_without_role_has_no_permissions(self):
        user = User.objects.create_user(email="norole@example.com", password="testpass123")
        self.assertFalse(user.has_permission("view_liquidation"))
        self.assertEqual(user.name, "norole@example.com")


class UserServiceTests(TestCase):
    def setUp(self):
        self.admin = _user()

    def test_create_user_strips_password_from_log(self):
        user = user_services.create_user(
            self.admin.id,
            {
                "name": "Rica Coordinator",
                "email": "rica@example.com",
                "password": "password123",
                "role": Role.objects.get(name=Role.REGIONAL_COORDINATOR),
                "region": Region.objects.create(code="R1", name="Region I"),
            },
        )
        self.assertTrue(user.check_password("password123"))
        entry = AuditEntry.objects.get(subject_id=str(user.id))
        self.assertEqual(entry.action, "created")
        self.assertIsNone(entry.new_values)

    def test_regional_coordinator_requires_region(self):
        with self.assertRaises(ValidationError) as ctx:
            user_services.create_user(
                self.admin.id,
                {
                    "name": "No Region",
                    "email": "noregion@example.com",
                    "password": "password123",
                    "role": Role.objects.get(name=Role.REGIONAL_COORDINATOR),
                },
            )
        self.assertIn("regionId", ctx.exception.details)

    def test_admin_cannot_grant_super_admin(self):
        target = _user(Role.ACCOUNTANT)
        with self.assertRaises(PermissionDeniedError):
            user_services.update_user(
                self.admin.id, target.id, {"role": Role.objects.get(name=Role.SUPER_ADMIN)}
            )

    def test_non_manager_denied(self):
        accountant = _user(Role.ACCOUNTANT)
        with self.assertRaises(PermissionDeniedError):
            user_services.delete_user(accountant.id, self.admin.id)

    def test_password_change_logged_without_values(self):
        target = _user(Role.ACCOUNTANT)
        user_services.update_user(self.admin.id, target.id, {"password": "brand-new-pass"})

        entry = AuditEntry.objects.get(subject_id=str(target.id), action="updated")
        self.assertIsNone(entry.old_values)
        self.assertIsNone(entry.new_values)

    def test_toggle_with_disabled_context_still_notifies(self):
        target = _user(Role.ACCOUNTANT)
        user_services.toggle_user_status(
            self.admin.id, target.id, context=AuditContext(enabled=False)
        )
        target.refresh_from_db()
        self.assertEqual(target.status, UserStatus.INACTIVE)
        self.assertFalse(AuditEntry.objects.exists())
        self.assertEqual(Notification.objects.filter(user=target).count(), 1)

    def test_toggle_twice_reactivates(self):
        target = _user(Role.ACCOUNTANT)
        user_services.toggle_user_status(self.admin.id, target.id)
        user = user_services.toggle_user_status(self.admin.id, target.id)
        self.assertEqual(user.status, UserStatus.ACTIVE)
        self.assertEqual(AuditEntry.objects.filter(action="toggled_status").count(), 2)

    def test_delete_self_refused(self):
        with self.assertRaises(InvalidStateError):
            user_services.delete_user(self.admin.id, self.admin.id)

    def test_service_logs_structured_event(self):
        target = _user(Role.ACCOUNTANT)
        with self.assertLogs("apps.users.services", level="INFO") as logs:
            user_services.delete_user(self.admin.id, target.id)
        record = logs.records[-1]
        self.assertEqual(record.getMessage(), "user_deleted")
        self.assertEqual(record.entity_id, str(target.id))


class CreateSuperAdminCommandTests(TestCase):
    def test_no_input_reads_password_from_env(self):
        out = StringIO()
        with mock.patch.dict(os.environ, {"SUPER_ADMIN_PASSWORD": "supersecret1"}):
            call_command(
                "create_super_admin",
                "--name",
                "Root Admin",
                "--email",
                "root@example.com",
                "--no-input",
                stdout=out,
            )
        user = User.objects.get(email="root@example.com")
        self.assertTrue(user.is_super_admin)
        self.assertTrue(user.check_password("supersecret1"))
        self.assertIn("Super Admin created successfully", out.getvalue())
        entry = AuditEntry.objects.get(subject_id=str(user.id))
        self.assertEqual(entry.actor_name, "System")

    def test_short_password_rejected(self):
        with mock.patch.dict(os.environ, {"SUPER_ADMIN_PASSWORD": "short"}):
            with self.assertRaises(CommandError):
                call_command(
                    "create_super_admin",
                    "--name",
                    "Root",
                    "--email",
                    "root@example.com",
                    "--no-input",
                    stdout=StringIO(),
                )
        self.assertFalse(User.objects.filter(email="root@example.com").exists())

    def test_duplicate_email_rejected(self):
        _user(email="taken@example.com")
        with self.assertRaises(CommandError):
            call_command(
                "create_super_admin",
                "--name",
                "Root",
                "--email",
                "taken@example.com",
                "--no-input",
                stdout=StringIO(),
            )

    def test_invalid_email_rejected(self):
        with self.assertRaises(CommandError):
            call_command(
                "create_super_admin",
                "--name",
                "Root",
                "--email",
                "not-an-email",
                "--no-input",
                stdout=StringIO(),
            )
