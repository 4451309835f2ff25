"""Tests for the daily slot catalogue."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from django.test import TestCase
from django.utils import timezone

from apps.bookings.models import Booking
from apps.reservations.services import acquire_lock
from apps.reservations.slots import SlotPolicy, generate_slots
from apps.venues.tests.utils import create_court, create_user


class SlotPolicyTests(TestCase):
    def test_default_day_has_sixteen_hourly_windows(self) -> None:
        windows = SlotPolicy().windows(date(2030, 1, 10))

        self.assertEqual(len(windows), 16)
        self.assertEqual(windows[0], (time(6, 0), time(7, 0)))
        self.assertEqual(windows[-1], (time(21, 0), time(22, 0)))

    def test_half_hour_policy(self) -> None:
        windows = SlotPolicy(day_start_hour=8, day_end_hour=10, slot_minutes=30).windows(date(2030, 1, 10))

        self.assertEqual(windows, [
            (time(8, 0), time(8, 30)),
            (time(8, 30), time(9, 0)),
            (time(9, 0), time(9, 30)),
            (time(9, 30), time(10, 0)),
        ])


class GenerateSlotsTests(TestCase):
    def setUp(self) -> None:
        self.court = create_court()
        self.alice = create_user()
        self.bob = create_user()
        self.day = date(2030, 1, 10)
        self.morning = timezone.make_aware(datetime(2030, 1, 9, 9, 0))

    def _slot(self, slots, hour: int):
        return next(slot for slot in slots if slot.start_time == time(hour, 0))

    def test_free_day_is_fully_available(self) -> None:
        slots = generate_slots(self.court.id, self.day, now=self.morning)

        self.assertEqual(len(slots), 16)
        self.assertEqual(slots[0].label, "06:00 - 07:00")
        self.assertTrue(all(slot.is_available for slot in slots))

    def test_started_hours_today_are_past(self) -> None:
        half_past_ten = timezone.make_aware(datetime(2030, 1, 10, 10, 30))

        slots = generate_slots(self.court.id, self.day, now=half_past_ten)

        past = [slot.start_time.hour for slot in slots if slot.is_past]
        self.assertEqual(past, [6, 7, 8, 9, 10])
        self.assertTrue(self._slot(slots, 11).is_available)

    def test_booking_marks_every_overlapping_window(self) -> None:
        Booking.objects.create(
            customer=self.bob,
            venue=self.court.venue,
            resource=self.court,
            booking_date=self.day,
            start_time=time(18, 0),
            end_time=time(20, 0),
            status=Booking.Status.PENDING_CONFIRMATION,
        )

        slots = generate_slots(self.court.id, self.day, self.alice.id, now=self.morning)

        booked = [slot.start_time.hour for slot in slots if slot.is_booked]
        self.assertEqual(booked, [18, 19])
        self.assertFalse(self._slot(slots, 18).is_available)

    def test_lock_blocks_others_but_not_its_holder(self) -> None:
        lock, _ = acquire_lock(self.court.id, self.day, time(7, 0), time(8, 0), self.alice.id, now=self.morning)

        for_bob = self._slot(generate_slots(self.court.id, self.day, self.bob.id, now=self.morning), 7)
        for_alice = self._slot(generate_slots(self.court.id, self.day, self.alice.id, now=self.morning), 7)

        self.assertTrue(for_bob.is_locked)
        self.assertFalse(for_bob.locked_by_me)
        self.assertFalse(for_bob.is_available)
        self.assertTrue(for_alice.locked_by_me)
        self.assertTrue(for_alice.is_available)
        self.assertEqual(for_alice.lock_id, str(lock.id))

    def test_lapsed_lock_is_ignored_before_sweep(self) -> None:
        acquire_lock(self.court.id, self.day, time(7, 0), time(8, 0), self.alice.id, now=self.morning)

        later = self.morning + timedelta(minutes=11)
        slot = self._slot(generate_slots(self.court.id, self.day, self.bob.id, now=later), 7)

        self.assertFalse(slot.is_locked)
        self.assertTrue(slot.is_available)
