"""
API tests for login / logout.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.users.models import Role, User, UserStatus


class AuthViewTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="login@example.com",
            password="testpass123",
            name="Login User",
            role=Role.objects.get(name=Role.ACCOUNTANT),
        )
        self.login_url = reverse("auth:login")
        self.logout_url = reverse("auth:logout")

    def _login(self):
        return self.client.post(
            self.login_url,
            {"email": "login@example.com", "password": "testpass123"},
            format="json",
        )

    def test_login_returns_tokens_and_user(self):
        response = self._login()
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.json()["data"]
        self.assertIn("token", data)
        self.assertIn("refreshToken", data)
        self.assertEqual(data["user"]["role"], Role.ACCOUNTANT)

    def test_login_wrong_password(self):
        response = self.client.post(
            self.login_url,
            {"email": "login@example.com", "password": "wrong-password"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")

    def test_login_inactive_user(self):
        self.user.status = UserStatus.INACTIVE
        self.user.save()
        response = self._login()
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_requires_email(self):
        response = self.client.post(self.login_url, {"password": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.json()["error"]["details"])

    def test_token_authenticates_requests(self):
        token = self._login().json()["data"]["token"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = self.client.get(reverse("users:current-user"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["email"], "login@example.com")

    def test_logout_blacklists_refresh_token(self):
        data = self._login().json()["data"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")

        response = self.client.post(
            self.logout_url, {"refresh_token": data["refreshToken"]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        with self.assertRaises(TokenError):
            RefreshToken(data["refreshToken"])

    def test_logout_with_bad_token_still_succeeds(self):
        self.client.force_authenticate(self.user)
        with self.assertLogs("apps.auth.views", level="INFO") as logs:
            response = self.client.post(
                self.logout_url, {"refresh_token": "garbage"}, format="json"
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(logs.records[0].getMessage(), "logout_token_rejected")

    def test_logout_requires_authentication(self):
        response = self.client.post(self.logout_url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_accepts_camel_case_refresh_token(self):
        data = self._login().json()["data"]
        self.client.force_authenticate(self.user)

        response = self.client.post(
            self.logout_url, {"refreshToken": data["refreshToken"]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        with self.assertRaises(TokenError):
            RefreshToken(data["refreshToken"])

    def test_failed_login_is_logged(self):
        with self.assertLogs("apps.auth.views", level="INFO") as logs:
            self.client.post(
                self.login_url,
                {"email": "login@example.com", "password": "nope"},
                format="json",
            )
        self.assertEqual(logs.records[0].getMessage(), "login_failed")
