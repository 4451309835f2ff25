"""Integration tests for venue reviews."""

from __future__ import annotations

from datetime import date, time

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.reviews.models import Review
from apps.users.models import User
from apps.venues.tests.utils import create_court, create_user


class ReviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.court = create_court()
        self.customer = create_user()
        self.list_url = reverse("review-list")

    def _booking(self, hour: int = 10, customer=None, status: str = Booking.Status.COMPLETED) -> Booking:
        return Booking.objects.create(
            customer=customer or self.customer,
            venue=self.court.venue,
            resource=self.court,
            booking_date=date(2030, 1, 10),
            start_time=time(hour, 0),
            end_time=time(hour + 1, 0),
            status=status,
        )

    def test_customer_reviews_completed_booking(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            self.list_url,
            {"booking": booking.id, "rating": 4, "comment": "Great lighting"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["venue_id"], self.court.venue.id)
        self.assertEqual(response.data["booking_code"], booking.booking_code)
        review = Review.objects.get()
        self.assertEqual(review.customer, self.customer)
        self.assertEqual(review.venue, self.court.venue)

    def test_booking_can_be_reviewed_once(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.customer)
        self.client.post(self.list_url, {"booking": booking.id, "rating": 5}, format="json")

        response = self.client.post(self.list_url, {"booking": booking.id, "rating": 1}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("booking", response.data)
        self.assertEqual(Review.objects.get().rating, 5)

    def test_rating_outside_range_is_rejected(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.customer)

        for rating in (0, 6):
            response = self.client.post(self.list_url, {"booking": booking.id, "rating": rating}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("rating", response.data)
        self.assertFalse(Review.objects.exists())

    def test_upcoming_booking_cannot_be_reviewed(self) -> None:
        booking = self._booking(status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.customer)

        response = self.client.post(self.list_url, {"booking": booking.id, "rating": 4}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Review.objects.exists())

    def test_someone_elses_booking_cannot_be_reviewed(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(create_user())

        response = self.client.post(self.list_url, {"booking": booking.id, "rating": 4}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_anonymous_visitor_reads_venue_summary(self) -> None:
        other = create_user()
        Review.objects.create(customer=self.customer, venue=self.court.venue, booking=self._booking(10), rating=5)
        Review.objects.create(customer=other, venue=self.court.venue, booking=self._booking(11, other), rating=4)
        elsewhere = create_court(name="Court B")
        Review.objects.create(
            customer=other,
            venue=elsewhere.venue,
            booking=Booking.objects.create(
                customer=other,
                venue=elsewhere.venue,
                resource=elsewhere,
                booking_date=date(2030, 1, 10),
                start_time=time(9, 0),
                end_time=time(10, 0),
                status=Booking.Status.COMPLETED,
            ),
            rating=1,
        )

        listing = self.client.get(f"{self.list_url}?venue={self.court.venue.id}")
        summary = self.client.get(f"{reverse('review-summary')}?venue={self.court.venue.id}")

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(len(listing.data), 2)
        self.assertEqual(summary.data, {"average_rating": 4.5, "review_count": 2})

    def test_only_author_or_admin_deletes_review(self) -> None:
        review = Review.objects.create(
            customer=self.customer, venue=self.court.venue, booking=self._booking(), rating=2
        )
        url = reverse("review-detail", args=[review.pk])

        self.client.force_authenticate(create_user())
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(create_user(User.RoleChoices.ADMIN))
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Review.objects.exists())
