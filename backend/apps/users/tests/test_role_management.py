"""
Tests for role management services and endpoints.
"""

import uuid

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import (
    ConflictError,
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
)
from apps.audit.models import AuditEntry
from apps.users import services as user_services
from apps.users.models import Permission, Role, User


def _user(role_name=Role.ADMIN, name=None):
    return User.objects.create_user(
        email=f"roles_{uuid.uuid4().hex[:8]}@example.com",
        password="testpass123",
        name=name or f"{role_name} User",
        role=Role.objects.get(name=role_name),
    )


def _permissions(*names):
    return list(Permission.objects.filter(name__in=names))


def _role_entries(role_id, action=None):
    entries = AuditEntry.objects.for_subject("users.Role", role_id)
    return entries.filter(action=action) if action else entries


class RoleServiceTests(TestCase):
    def setUp(self):
        self.admin = _user(Role.ADMIN, name="Ada Admin")

    def test_create_role_with_permissions(self):
        role = user_services.create_role(
            self.admin.id,
            {
                "name": "Auditor",
                "description": "Read-only reviewer",
                "permissions": _permissions("view_liquidation", "view_activity_logs"),
            },
        )

        self.assertEqual(
            set(role.permissions.values_list("name", flat=True)),
            {"view_liquidation", "view_activity_logs"},
        )
        entry = _role_entries(role.id).get()
        self.assertEqual(entry.action, "created")
        self.assertEqual(entry.description, "Created role Auditor")
        self.assertEqual(entry.module, "Roles")
        self.assertEqual(entry.actor_name, "Ada Admin")

    def test_create_duplicate_name_is_conflict(self):
        with self.assertRaises(ConflictError):
            user_services.create_role(self.admin.id, {"name": Role.ACCOUNTANT})
        self.assertFalse(AuditEntry.objects.exists())

    def test_only_role_managers(self):
        accountant = _user(Role.ACCOUNTANT)
        with self.assertRaises(PermissionDeniedError):
            user_services.create_role(accountant.id, {"name": "Auditor"})

    def test_update_syncs_permissions(self):
        role = Role.objects.create(name="Auditor")
        role.permissions.set(_permissions("view_liquidation", "view_activity_logs"))

        user_services.update_role(
            self.admin.id,
            role.id,
            {"permissions": _permissions("view_liquidation", "view_all_liquidations")},
        )

        self.assertEqual(
            set(role.permissions.values_list("name", flat=True)),
            {"view_liquidation", "view_all_liquidations"},
        )
        entry = _role_entries(role.id, "synced_permissions").get()
        self.assertEqual(entry.old_values, {"Permissions": ["view_activity_logs", "view_liquidation"]})
        self.assertEqual(
            entry.new_values, {"Permissions": ["view_all_liquidations", "view_liquidation"]}
        )
        # Only updated_at changed on the row itself
        self.assertFalse(_role_entries(role.id, "updated").exists())

    def test_update_with_same_permissions_writes_nothing(self):
        role = Role.objects.create(name="Auditor")
        role.permissions.set(_permissions("view_liquidation"))

        user_services.update_role(
            self.admin.id, role.id, {"permissions": _permissions("view_liquidation")}
        )
        self.assertFalse(_role_entries(role.id).exists())

    def test_update_name_records_diff(self):
        role = Role.objects.create(name="Auditor")
        user_services.update_role(self.admin.id, role.id, {"name": "Internal Auditor"})

        entry = _role_entries(role.id, "updated").get()
        self.assertEqual(entry.old_values, {"Name": "Auditor"})
        self.assertEqual(entry.new_values, {"Name": "Internal Auditor"})

    def test_update_requires_fields(self):
        role = Role.objects.create(name="Auditor")
        with self.assertRaises(ValidationError):
            user_services.update_role(self.admin.id, role.id, {})

    def test_built_in_role_cannot_be_renamed(self):
        hei_role = Role.objects.get(name=Role.HEI)
        with self.assertRaises(InvalidStateError):
            user_services.update_role(self.admin.id, hei_role.id, {"name": "Schools"})

        user_services.update_role(self.admin.id, hei_role.id, {"description": "Institutions"})
        hei_role.refresh_from_db()
        self.assertEqual(hei_role.description, "Institutions")

    def test_admin_cannot_modify_super_admin_role(self):
        super_admin_role = Role.objects.get(name=Role.SUPER_ADMIN)
        with self.assertRaises(PermissionDeniedError):
            user_services.update_role(
                self.admin.id, super_admin_role.id, {"permissions": []}
            )
        self.assertTrue(super_admin_role.permissions.exists())

    def test_super_admin_can_edit_super_admin_role(self):
        root = _user(Role.SUPER_ADMIN)
        super_admin_role = Role.objects.get(name=Role.SUPER_ADMIN)
        user_services.update_role(root.id, super_admin_role.id, {"description": "Everything"})
        super_admin_role.refresh_from_db()
        self.assertEqual(super_admin_role.description, "Everything")

    def test_delete_unused_role(self):
        role = Role.objects.create(name="Auditor")
        user_services.delete_role(self.admin.id, role.id)

        self.assertFalse(Role.objects.filter(id=role.id).exists())
        entry = _role_entries(role.id, "deleted").get()
        self.assertEqual(entry.description, "Deleted role Auditor")

    def test_delete_admin_role_refused(self):
        admin_role = Role.objects.get(name=Role.ADMIN)
        with self.assertRaises(InvalidStateError):
            user_services.delete_role(_user(Role.SUPER_ADMIN).id, admin_role.id)
        self.assertTrue(Role.objects.filter(id=admin_role.id).exists())

    def test_delete_role_with_users_refused(self):
        role = Role.objects.create(name="Auditor")
        User.objects.create_user(
            email="auditor@example.com", password="testpass123", name="Aud", role=role
        )
        with self.assertRaises(InvalidStateError) as ctx:
            user_services.delete_role(self.admin.id, role.id)
        self.assertEqual(ctx.exception.details, {"users": 1})
        self.assertFalse(AuditEntry.objects.filter(action="deleted").exists())


class RoleViewTests(APITestCase):
    def setUp(self):
        self.admin = _user(Role.ADMIN)
        self.client.force_authenticate(self.admin)
        self.list_url = reverse("users:list-or-create-roles")

    def _detail_url(self, role):
        return reverse("users:update-or-delete-role", kwargs={"roleId": role.id})

    def test_list_roles(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        roles = {item["name"]: item for item in response.json()["data"]}
        self.assertIn(Role.HEI, roles)
        self.assertEqual(roles[Role.ADMIN]["usersCount"], 1)
        self.assertIn("manage_roles", roles[Role.ADMIN]["permissions"])

    def test_create_role(self):
        permission = Permission.objects.get(name="view_liquidation")
        response = self.client.post(
            self.list_url,
            {"name": "Auditor", "permissionIds": [str(permission.id)]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.json()["data"]
        self.assertEqual(data["permissions"], ["view_liquidation"])
        self.assertEqual(data["usersCount"], 0)

    def test_create_with_unknown_permission(self):
        response = self.client.post(
            self.list_url,
            {"name": "Auditor", "permissionIds": [str(uuid.uuid4())]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("permissionIds", response.json()["error"]["details"])

    def test_create_duplicate_returns_conflict(self):
        response = self.client.post(self.list_url, {"name": Role.HEI}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "CONFLICT")

    def test_patch_clears_permissions(self):
        role = Role.objects.create(name="Auditor")
        role.permissions.set(_permissions("view_liquidation"))

        response = self.client.patch(
            self._detail_url(role), {"permissionIds": []}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["permissions"], [])

    def test_delete_role(self):
        role = Role.objects.create(name="Auditor")
        response = self.client.delete(self._detail_url(role))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_delete_role_in_use_conflict(self):
        role = Role.objects.get(name=Role.ADMIN)
        response = self.client.delete(self._detail_url(role))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "INVALID_STATE")

    def test_permissions_grouped_by_module(self):
        response = self.client.get(reverse("users:list-permissions"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        groups = {item["module"]: item["permissions"] for item in response.json()["data"]}
        self.assertIn("manage_roles", [p["name"] for p in groups["Roles"]])

    def test_requires_manage_roles(self):
        self.client.force_authenticate(_user(Role.HEI))
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
