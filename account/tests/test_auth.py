from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from account.models import Role, User


class RoleSeedTest(APITestCase):
    def test_default_roles_exist(self):
        names = set(Role.objects.values_list("name", flat=True))
        self.assertTrue({Role.ADMIN, Role.INVIGILATOR} <= names)


class LoginTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="admin@example.com", name="Admin", password="pass12345", role=Role.ADMIN
        )

    def test_login_returns_tokens_and_role(self):
        response = self.client.post(
            reverse("login"), {"email": "admin@example.com", "password": "pass12345"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data["token"])
        self.assertIn("refresh", response.data["token"])
        self.assertEqual(response.data["role"], Role.ADMIN)

    def test_wrong_password(self):
        response = self.client.post(
            reverse("login"), {"email": "admin@example.com", "password": "wrong-pass"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_deactivated_account(self):
        self.user.is_active = False
        self.user.save()

        response = self.client.post(
            reverse("login"), {"email": "admin@example.com", "password": "pass12345"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bearer_token_reaches_profile(self):
        login = self.client.post(
            reverse("login"), {"email": "admin@example.com", "password": "pass12345"}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['token']['access']}")

        response = self.client.get(reverse("profile"))

        self.assertEqual(response.data["email"], "admin@example.com")
        self.assertEqual(response.data["role"], Role.ADMIN)


class ChangePasswordTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="inv@example.com", name="Inv", password="pass12345")
        self.client.force_authenticate(self.user)

    def test_change_password(self):
        response = self.client.post(
            reverse("change-password"),
            {"old_password": "pass12345", "new_password": "newpass678", "confirm_password": "newpass678"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("newpass678"))

    def test_mismatched_confirmation(self):
        response = self.client.post(
            reverse("change-password"),
            {"old_password": "pass12345", "new_password": "newpass678", "confirm_password": "other678"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
