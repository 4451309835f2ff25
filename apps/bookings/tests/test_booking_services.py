"""Tests for turning slot locks into bookings."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, OperationalError
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.services import (
    BookingDetails,
    BookingPermissionError,
    BookingStateError,
    LockExpired,
    LockNotUsable,
    SlotNoLongerAvailable,
    cancel_booking,
    confirm_booking,
    convenience_fee_for,
    finalize_booking,
    split_commission,
)
from apps.reservations.models import SlotLock
from apps.reservations.services import (
    SlotAlreadyBooked,
    SlotLockedByAnother,
    acquire_lock,
    release_lock,
    sweep_expired_locks,
)
from apps.users.models import User
from apps.venues.tests.utils import create_court, create_user

SIX = time(6, 0)
SEVEN = time(7, 0)


class PricingTests(TestCase):
    def test_commission_is_rounded_half_up(self) -> None:
        with override_settings(PLATFORM_COMMISSION_PERCENT="12.5"):
            percent, commission, payout = split_commission(Decimal("333.33"))

        self.assertEqual(percent, Decimal("12.5"))
        self.assertEqual(commission, Decimal("41.67"))
        self.assertEqual(payout, Decimal("291.66"))

    def test_convenience_fee_is_whole_rupees(self) -> None:
        self.assertEqual(convenience_fee_for(Decimal("525.00")), Decimal("11"))
        self.assertEqual(convenience_fee_for(Decimal("500.00")), Decimal("10"))


class FinalizeBookingTests(TestCase):
    def setUp(self) -> None:
        self.court = create_court(price="500.00")
        self.alice = create_user()
        self.bob = create_user()
        self.day = timezone.localdate() + timedelta(days=3)
        self.now = timezone.now()
        self.lock, _ = acquire_lock(self.court.id, self.day, SIX, SEVEN, self.alice.id, now=self.now)

    def test_manual_payment_awaits_venue_confirmation(self) -> None:
        booking = finalize_booking(
            self.lock.id,
            self.alice.id,
            BookingDetails(notes="Bring shuttles", payment_intent_id="UPI-42"),
            now=self.now + timedelta(minutes=3),
        )

        self.assertEqual(booking.status, Booking.Status.PENDING_CONFIRMATION)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertEqual(booking.total_amount, Decimal("500.00"))
        self.assertEqual(booking.platform_commission, Decimal("50.00"))
        self.assertEqual(booking.provider_payout, Decimal("450.00"))
        self.assertEqual(booking.venue, self.court.venue)
        self.assertEqual(len(booking.booking_code), 8)
        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.CONVERTED)
        self.assertEqual(self.lock.booking, booking)

    def test_verified_payment_confirms_immediately(self) -> None:
        booking = finalize_booking(
            self.lock.id,
            self.alice.id,
            BookingDetails(payment_intent_id="pay_1", payment_verified=True),
        )

        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.COMPLETED)

    def test_expired_lock_cannot_be_finalised(self) -> None:
        with self.assertRaises(LockExpired):
            finalize_booking(self.lock.id, self.alice.id, now=self.now + timedelta(minutes=11))

        self.assertFalse(Booking.objects.exists())
        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.ACTIVE)

    def test_foreign_lock_cannot_be_finalised(self) -> None:
        with self.assertRaises(LockNotUsable):
            finalize_booking(self.lock.id, self.bob.id)

    def test_lock_is_single_use(self) -> None:
        finalize_booking(self.lock.id, self.alice.id)

        with self.assertRaises(LockNotUsable):
            finalize_booking(self.lock.id, self.alice.id)
        self.assertEqual(Booking.objects.count(), 1)

    def test_slot_taken_behind_the_lock_is_detected(self) -> None:
        Booking.objects.create(
            customer=self.bob,
            venue=self.court.venue,
            resource=self.court,
            booking_date=self.day,
            start_time=SIX,
            end_time=SEVEN,
            status=Booking.Status.CONFIRMED,
        )

        with self.assertRaises(SlotNoLongerAvailable):
            finalize_booking(self.lock.id, self.alice.id)

        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.ACTIVE)

    def test_duplicate_insert_leaves_lock_active(self) -> None:
        with mock.patch.object(Booking.objects, "create", side_effect=IntegrityError("duplicate slot")):
            with self.assertRaises(SlotNoLongerAvailable):
                finalize_booking(self.lock.id, self.alice.id)

        self.assertFalse(Booking.objects.exists())
        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.ACTIVE)

    def test_database_failure_on_insert_leaves_lock_active(self) -> None:
        with mock.patch.object(Booking.objects, "create", side_effect=OperationalError("connection lost")):
            with self.assertRaises(OperationalError):
                finalize_booking(self.lock.id, self.alice.id)

        self.assertFalse(Booking.objects.exists())
        self.lock.refresh_from_db()
        self.assertEqual(self.lock.status, SlotLock.Status.ACTIVE)

    def test_swept_lock_cannot_take_back_a_relocked_slot(self) -> None:
        later = self.now + timedelta(minutes=11)
        self.assertEqual(sweep_expired_locks(later), 1)
        bob_lock, created = acquire_lock(self.court.id, self.day, SIX, SEVEN, self.bob.id, now=later)
        self.assertTrue(created)

        with self.assertRaises(LockExpired):
            finalize_booking(self.lock.id, self.alice.id, now=later)

        self.assertFalse(Booking.objects.exists())
        bob_lock.refresh_from_db()
        self.assertEqual(bob_lock.status, SlotLock.Status.ACTIVE)
        self.assertEqual(bob_lock.locked_by, self.bob)

    def test_released_lock_is_not_reported_as_timed_out(self) -> None:
        release_lock(self.lock.id, self.alice.id)

        with self.assertRaises(LockNotUsable) as ctx:
            finalize_booking(self.lock.id, self.alice.id)

        self.assertNotIsInstance(ctx.exception, LockExpired)
        self.assertEqual(ctx.exception.code, "lock_not_usable")

    def test_booked_slot_refuses_new_locks(self) -> None:
        finalize_booking(self.lock.id, self.alice.id)

        with self.assertRaises(SlotAlreadyBooked):
            acquire_lock(self.court.id, self.day, SIX, SEVEN, self.bob.id)

    def test_three_customers_race_for_one_slot(self) -> None:
        carol = create_user()

        with self.assertRaises(SlotLockedByAnother):
            acquire_lock(self.court.id, self.day, SIX, SEVEN, self.bob.id, now=self.now + timedelta(minutes=1))

        finalize_booking(
            self.lock.id,
            self.alice.id,
            BookingDetails(payment_intent_id="pay_1", payment_verified=True),
            now=self.now + timedelta(minutes=5),
        )

        with self.assertRaises(SlotAlreadyBooked):
            acquire_lock(self.court.id, self.day, SIX, SEVEN, carol.id, now=self.now + timedelta(minutes=12))


class BookingTransitionTests(TestCase):
    def setUp(self) -> None:
        self.court = create_court()
        self.provider = self.court.venue.provider
        self.alice = create_user()
        self.day = timezone.localdate() + timedelta(days=3)
        lock, _ = acquire_lock(self.court.id, self.day, SIX, SEVEN, self.alice.id)
        self.booking = finalize_booking(lock.id, self.alice.id, BookingDetails(payment_intent_id="UPI-7"))

    def test_customer_cancellation_frees_slot(self) -> None:
        cancelled = cancel_booking(self.booking, self.alice, "Rain")

        self.assertEqual(cancelled.status, Booking.Status.CANCELLED)
        self.assertEqual(cancelled.cancelled_by, Booking.CancelledBy.CUSTOMER)
        self.assertIsNotNone(cancelled.cancelled_at)
        _, created = acquire_lock(self.court.id, self.day, SIX, SEVEN, create_user().id)
        self.assertTrue(created)

    def test_provider_cancellation_is_attributed(self) -> None:
        self.assertEqual(
            cancel_booking(self.booking, self.provider).cancelled_by,
            Booking.CancelledBy.PROVIDER,
        )

    def test_stranger_cannot_cancel(self) -> None:
        with self.assertRaises(BookingPermissionError):
            cancel_booking(self.booking, create_user())

    def test_cancelled_booking_cannot_be_cancelled_again(self) -> None:
        cancel_booking(self.booking, self.alice)

        with self.assertRaises(BookingStateError):
            cancel_booking(self.booking, self.alice)

    def test_provider_confirms_manual_payment(self) -> None:
        confirmed = confirm_booking(self.booking, self.provider)

        self.assertEqual(confirmed.status, Booking.Status.CONFIRMED)
        self.assertEqual(confirmed.payment_status, Booking.PaymentStatus.COMPLETED)

    def test_customer_cannot_confirm(self) -> None:
        with self.assertRaises(BookingPermissionError):
            confirm_booking(self.booking, self.alice)

    def test_admin_confirms_once(self) -> None:
        admin = create_user(User.RoleChoices.ADMIN)
        confirm_booking(self.booking, admin)

        with self.assertRaises(BookingStateError):
            confirm_booking(self.booking, admin)
