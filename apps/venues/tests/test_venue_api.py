"""API tests for the venue catalogue."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User
from apps.venues.models import Resource, Sport, Venue

from .utils import create_court, create_user


class VenueCatalogueTests(APITestCase):
    def setUp(self) -> None:
        self.court = create_court()
        self.venue = self.court.venue
        self.pending_court = create_court(approved=False)

    def test_public_listing_shows_only_approved_venues(self) -> None:
        response = self.client.get(reverse("venue-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [item["id"] for item in response.data]
        self.assertIn(self.venue.id, ids)
        self.assertNotIn(self.pending_court.venue_id, ids)

    def test_filter_by_sport_matches_resource_sport(self) -> None:
        table_tennis = Sport.objects.create(name="Table Tennis")
        Resource.objects.create(venue=self.venue, sport=table_tennis, name="Table 1")

        response = self.client.get(reverse("venue-list"), {"sport": table_tennis.id})

        self.assertEqual([item["id"] for item in response.data], [self.venue.id])

    def test_resource_inherits_venue_price(self) -> None:
        response = self.client.get(reverse("venue-resources", args=[self.venue.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data[0]["hourly_rate"]), Decimal("500.00"))

    def test_provider_creates_venue_pending_review(self) -> None:
        provider = create_user(User.RoleChoices.PROVIDER)
        self.client.force_authenticate(provider)
        payload = {
            "sport": self.venue.sport_id,
            "name": "Net Zone",
            "location": "Koramangala, Bengaluru",
            "price_per_hour": "800.00",
        }

        response = self.client.post(reverse("venue-list"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        venue = Venue.objects.get(name="Net Zone")
        self.assertEqual(venue.provider, provider)
        self.assertEqual(venue.verification_status, Venue.VerificationStatus.PENDING)

    def test_customer_cannot_create_venue(self) -> None:
        self.client.force_authenticate(create_user())

        response = self.client.post(
            reverse("venue-list"),
            {"sport": self.venue.sport_id, "name": "X", "location": "Y", "price_per_hour": "1.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_approves_venue(self) -> None:
        admin = create_user(User.RoleChoices.ADMIN)
        self.client.force_authenticate(admin)

        response = self.client.post(reverse("venue-approve", args=[self.pending_court.venue_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.pending_court.venue.refresh_from_db()
        self.assertTrue(self.pending_court.venue.is_bookable)
