"""
Integration tests — login with username or email, and the ``me`` profile.

Endpoint under test:  POST /api/accounts/auth/login/
                      (named URL: accounts:login)
Request payload:      {"identifier": "<username|email>", "password": "<password>"}
Success response:     HTTP 200, body contains {"access": "...", "refresh": "...",
                      "user": {...}}
Failure response:     HTTP 400 — CustomTokenObtainPairSerializer.validate
                      rejects invalid credentials
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import Office, UserType

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestAuthLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.office = Office.objects.create(name="Roads Maintenance")
        cls.user = User.objects.create_user(
            username="login_staff",
            email="login_staff@example.com",
            password=_PASSWORD,
            first_name="Login",
            last_name="Tester",
            user_type=UserType.TECHNICAL_STAFF_MEMBER,
        )
        cls.user.offices.add(cls.office)

    def setUp(self):
        self.client = APIClient()
        self.login_url = reverse("accounts:login")

    def _post_login(self, identifier: str, password: str):
        return self.client.post(
            self.login_url,
            {"identifier": identifier, "password": password},
            format="json",
        )

    def test_login_with_username(self):
        resp = self._post_login("login_staff", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)
        self.assertEqual(resp.data["user"]["user_type"], UserType.TECHNICAL_STAFF_MEMBER)
        self.assertEqual(resp.data["user"]["offices"], [{"id": self.office.pk, "name": "Roads Maintenance"}])

    def test_login_with_email_is_case_insensitive(self):
        resp = self._post_login("LOGIN_STAFF@example.com", _PASSWORD)
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)

    def test_token_carries_user_type(self):
        resp = self._post_login("login_staff", _PASSWORD)
        token = AccessToken(resp.data["access"])
        self.assertEqual(token["user_type"], UserType.TECHNICAL_STAFF_MEMBER)

    def test_wrong_password(self):
        resp = self._post_login("login_staff", "wrong-password")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_user_cannot_login(self):
        User.objects.filter(pk=self.user.pk).update(is_active=False)
        resp = self._post_login("login_staff", _PASSWORD)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_returns_new_access_token(self):
        refresh = self._post_login("login_staff", _PASSWORD).data["refresh"]
        resp = self.client.post(reverse("accounts:token-refresh"), {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data)

    def test_me(self):
        access = self._post_login("login_staff", _PASSWORD).data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        resp = self.client.get(reverse("accounts:me"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["username"], "login_staff")
        self.assertEqual(resp.data["user_type_display"], "Technical Staff Member")

    def test_me_requires_token(self):
        resp = self.client.get(reverse("accounts:me"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
