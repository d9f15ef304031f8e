"""
Authority smoke tests - no privilege escalation via API.
"""

from django.test import TestCase
from rest_framework.test import APIClient

from apps.users.models import Role, User


class AuthoritySmokeTests(TestCase):
    """Super Admin accounts cannot be created or granted via API."""

    def setUp(self):
        self.client = APIClient()
        User.objects.create_user(
            email="admin_authority@example.com",
            password="testpass123",
            name="Authority Admin",
            role=Role.objects.get(name=Role.ADMIN),
        )
        r = self.client.post(
            "/api/v1/auth/login",
            {"email": "admin_authority@example.com", "password": "testpass123"},
            format="json",
        )
        self.assertEqual(r.status_code, 200, r.data)
        self.token = r.data["data"]["token"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {self.token}")

    def test_cannot_create_super_admin_via_api(self):
        """POST /api/v1/users/ with the Super Admin role must return 400."""
        super_admin = Role.objects.get(name=Role.SUPER_ADMIN)
        r = self.client.post(
            "/api/v1/users/",
            {
                "name": "Would Be",
                "email": "would_be@example.com",
                "password": "password123",
                "roleId": str(super_admin.id),
            },
            format="json",
        )
        self.assertEqual(r.status_code, 400, r.data)
        # Validation errors live in error.details (structured error contract)
        self.assertEqual(
            r.data["error"]["details"]["roleId"][0],
            "Cannot create Super Admin users via API",
        )
        self.assertFalse(User.objects.filter(email="would_be@example.com").exists())

    def test_admin_cannot_modify_super_admin(self):
        root = User.objects.create_superuser(
            email="root@example.com", password="testpass123", name="Root"
        )
        r = self.client.patch(
            f"/api/v1/users/{root.id}", {"name": "Hijacked"}, format="json"
        )
        self.assertEqual(r.status_code, 403, r.data)
        root.refresh_from_db()
        self.assertEqual(root.name, "Root")

    def test_token_authenticated_mutation_attributed_to_caller(self):
        accountant_role = Role.objects.get(name=Role.ACCOUNTANT)
        r = self.client.post(
            "/api/v1/users/",
            {
                "name": "New Accountant",
                "email": "accountant@example.com",
                "password": "password123",
                "roleId": str(accountant_role.id),
            },
            format="json",
            HTTP_X_REQUEST_ID="req-authority-1",
            HTTP_USER_AGENT="authority-tests",
        )
        self.assertEqual(r.status_code, 201, r.data)
        self.assertEqual(r["X-Request-ID"], "req-authority-1")

        from apps.audit.models import AuditEntry

        entry = AuditEntry.objects.get(subject_id=r.data["data"]["id"], action="created")
        self.assertEqual(entry.actor_name, "Authority Admin")
        self.assertEqual(entry.request_id, "req-authority-1")
        self.assertEqual(entry.user_agent, "authority-tests")
        self.assertEqual(entry.module, "User Management")
