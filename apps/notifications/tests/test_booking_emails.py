"""Tests for transactional booking emails."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase

from apps.bookings.models import Booking
from apps.notifications.services import (
    send_booking_cancelled_email,
    send_booking_confirmation_email,
    send_new_booking_to_provider_email,
)
from apps.venues.tests.utils import create_court, create_user


class BookingEmailTests(TestCase):
    def setUp(self) -> None:
        self.court = create_court(price="400.00")
        self.customer = create_user()
        self.booking = Booking.objects.create(
            customer=self.customer,
            venue=self.court.venue,
            resource=self.court,
            booking_date=date(2030, 3, 5),
            start_time=time(7, 0),
            end_time=time(8, 0),
            status=Booking.Status.CONFIRMED,
            total_amount=Decimal("400.00"),
            convenience_fee=Decimal("8.00"),
            payment_intent_id="UPI-88",
        )

    def test_confirmation_lists_slot_and_amount(self) -> None:
        self.assertTrue(send_booking_confirmation_email(self.booking))

        message = mail.outbox[0]
        self.assertEqual(message.to, [self.customer.email])
        self.assertIn(self.booking.booking_code, message.subject)
        self.assertIn("07:00 - 08:00", message.body)
        self.assertIn("408.00 INR", message.body)
        self.assertEqual(message.alternatives[0][1], "text/html")

    def test_cancellation_mentions_reason(self) -> None:
        self.booking.cancellation_reason = "Court maintenance"

        send_booking_cancelled_email(self.booking)

        self.assertIn("Court maintenance", mail.outbox[0].body)

    def test_provider_alert_goes_to_venue_owner(self) -> None:
        send_new_booking_to_provider_email(self.booking)

        self.assertEqual(mail.outbox[0].to, [self.court.venue.provider.email])
        self.assertIn("UPI-88", mail.outbox[0].body)

    def test_delivery_failure_is_reported_not_raised(self) -> None:
        with mock.patch("apps.notifications.services.send_mail", side_effect=ConnectionRefusedError):
            self.assertFalse(send_booking_confirmation_email(self.booking))
