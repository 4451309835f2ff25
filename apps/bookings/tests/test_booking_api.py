"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import time, timedelta
from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.payments.models import Payment
from apps.reservations.models import SlotLock
from apps.reservations.services import acquire_lock
from apps.users.models import User
from apps.venues.tests.utils import create_court, create_user


class BookingAPITests(APITestCase):
    """Covers finalisation, cancellation, confirmation and visibility of bookings."""

    def setUp(self) -> None:
        self.court = create_court(price="600.00")
        self.provider = self.court.venue.provider
        self.customer = create_user()
        self.day = timezone.localdate() + timedelta(days=2)
        self.lock, _ = acquire_lock(self.court.id, self.day, time(19, 0), time(20, 0), self.customer.id)
        self.client.force_authenticate(self.customer)
        self.list_url = reverse("booking-list")

    def _book(self, **extra) -> dict:
        payload = {"lock": str(self.lock.id), **extra}
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def test_customer_books_held_slot_with_upi_reference(self) -> None:
        data = self._book(notes="Doubles", payment_reference="UPI-123")

        self.assertEqual(data["status"], Booking.Status.PENDING_CONFIRMATION)
        self.assertEqual(data["total_amount"], "600.00")
        self.assertEqual(data["label"], "19:00 - 20:00")
        payment = Payment.objects.get(booking_id=data["id"])
        self.assertEqual(payment.method, Payment.Method.UPI_MANUAL)
        self.assertEqual(payment.gateway_payment_id, "UPI-123")

    def test_failed_payment_record_rolls_back_booking(self) -> None:
        with mock.patch(
            "apps.bookings.views.record_manual_payment",
            side_effect=DatabaseError("payments table unavailable"),
        ):
            with self.assertRaises(DatabaseError):
                self.client.post(
                    self.list_url,
                    {"lock": str(self.lock.id), "payment_reference": "UPI-123"},
                    format="json",
                )

        self.assertFalse(Booking.objects.exists())
        self.assertFalse(Payment.objects.exists())
        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.ACTIVE)

    def test_booking_without_reference_stays_pending(self) -> None:
        data = self._book()

        self.assertEqual(data["status"], Booking.Status.PENDING)
        self.assertFalse(Payment.objects.exists())

    def test_expired_lock_is_rejected(self) -> None:
        SlotLock.objects.filter(pk=self.lock.pk).update(expires_at=timezone.now() - timedelta(seconds=1))

        response = self.client.post(self.list_url, {"lock": str(self.lock.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "lock_expired")
        self.assertFalse(Booking.objects.exists())

    def test_someone_elses_lock_is_rejected(self) -> None:
        self.client.force_authenticate(create_user())

        response = self.client.post(self.list_url, {"lock": str(self.lock.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "lock_not_usable")

    def test_cancel_and_confirm_flow(self) -> None:
        booking_id = self._book(payment_reference="UPI-9")["id"]

        self.client.force_authenticate(self.provider)
        confirm = self.client.post(reverse("booking-confirm", args=[booking_id]))
        self.assertEqual(confirm.status_code, status.HTTP_200_OK, confirm.data)
        self.assertEqual(confirm.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(Payment.objects.get(booking_id=booking_id).status, Payment.Status.COMPLETED)

        self.client.force_authenticate(self.customer)
        cancel = self.client.post(reverse("booking-cancel", args=[booking_id]), {"reason": "Injury"}, format="json")
        self.assertEqual(cancel.status_code, status.HTTP_200_OK, cancel.data)
        self.assertEqual(cancel.data["status"], Booking.Status.CANCELLED)
        self.assertEqual(cancel.data["cancelled_by"], Booking.CancelledBy.CUSTOMER)

    def test_customer_cannot_confirm_own_booking(self) -> None:
        booking_id = self._book(payment_reference="UPI-9")["id"]

        response = self.client.post(reverse("booking-confirm", args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "permission_denied")

    def test_listing_is_scoped_by_role(self) -> None:
        booking_id = self._book()["id"]
        outsider = create_user()
        other_provider = create_user(User.RoleChoices.PROVIDER)
        admin = create_user(User.RoleChoices.ADMIN)

        expectations = [
            (self.customer, [booking_id]),
            (self.provider, [booking_id]),
            (outsider, []),
            (other_provider, []),
            (admin, [booking_id]),
        ]
        for user, expected in expectations:
            self.client.force_authenticate(user)
            response = self.client.get(self.list_url)
            self.assertEqual([item["id"] for item in response.data], expected, user.email)

    def test_stranger_gets_not_found_on_cancel(self) -> None:
        booking_id = self._book()["id"]
        self.client.force_authenticate(create_user())

        response = self.client.post(reverse("booking-cancel", args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
