"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "player@example.com",
            "phone": "+919800000001",
            "first_name": "Asha",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("tokens", response.data)
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.CUSTOMER)
        self.assertTrue(User.objects.get(email=payload["email"]).is_approved)

    def test_provider_registration_awaits_approval(self) -> None:
        payload = {
            "email": "owner@example.com",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
            "role": User.RoleChoices.PROVIDER,
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        provider = User.objects.get(email=payload["email"])
        self.assertTrue(provider.is_provider())
        self.assertFalse(provider.is_approved)

    def test_login_by_phone(self) -> None:
        User.objects.create_user(
            email="login@example.com",
            phone="+91 98000-00002",
            password="CorrectPassword1",
        )

        response = self.client.post(
            reverse("auth:login"),
            {"login": "+919800000002", "password": "CorrectPassword1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])

    def test_suspended_user_cannot_login(self) -> None:
        User.objects.create_user(
            email="blocked@example.com",
            password="CorrectPassword1",
            is_suspended=True,
        )

        response = self.client.post(
            reverse("auth:login"),
            {"login": "blocked@example.com", "password": "CorrectPassword1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
