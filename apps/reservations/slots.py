"""Daily slot catalogue for a bookable resource.

The catalogue is derived, never stored: each request rebuilds the list of
fixed-length windows for one resource and one date and annotates each
window with its occupancy (bookings, live locks, elapsed time). The
functions here only read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking

from .models import SlotLock


@dataclass(frozen=True)
class SlotPolicy:
    """Operating hours and slot length used to cut a day into windows."""

    day_start_hour: int = 6
    day_end_hour: int = 22
    slot_minutes: int = 60

    @classmethod
    def from_settings(cls) -> "SlotPolicy":
        return cls(
            day_start_hour=settings.SLOT_DAY_START_HOUR,
            day_end_hour=settings.SLOT_DAY_END_HOUR,
            slot_minutes=settings.SLOT_DURATION_MINUTES,
        )

    def windows(self, slot_date: date) -> list[tuple[time, time]]:
        opening = datetime.combine(slot_date, time(self.day_start_hour))
        closing = datetime.combine(slot_date, time(0)) + timedelta(hours=self.day_end_hour)
        step = timedelta(minutes=self.slot_minutes)

        result = []
        cursor = opening
        while cursor + step <= closing:
            result.append((cursor.time(), (cursor + step).time()))
            cursor += step
        return result


@dataclass
class Slot:
    resource_id: int
    slot_date: date
    start_time: time
    end_time: time
    is_booked: bool = False
    is_past: bool = False
    is_locked: bool = False
    locked_by_me: bool = False
    lock_id: str | None = None

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    @property
    def is_available(self) -> bool:
        """Whether the viewer may select this window."""

        if self.is_booked or self.is_past:
            return False
        return not self.is_locked or self.locked_by_me


def _overlaps(start: time, end: time, other_start: time, other_end: time) -> bool:
    return start < other_end and end > other_start


def generate_slots(
    resource_id: int,
    slot_date: date,
    viewer_id: int | None = None,
    *,
    now: datetime | None = None,
    policy: SlotPolicy | None = None,
) -> list[Slot]:
    """Build the annotated slot list for ``resource_id`` on ``slot_date``.

    Locks whose deadline has passed are ignored even if the sweeper has
    not yet flipped their status, so the catalogue never shows a stale
    hold as blocking.
    """

    policy = policy or SlotPolicy.from_settings()
    now = now or timezone.now()

    bookings = list(
        Booking.objects.filter(
            resource_id=resource_id,
            booking_date=slot_date,
            status__in=Booking.OCCUPYING_STATUSES,
        ).values_list("start_time", "end_time")
    )
    live_locks = {
        lock.start_time: lock
        for lock in SlotLock.objects.filter(
            resource_id=resource_id,
            slot_date=slot_date,
            status=SlotLock.Status.ACTIVE,
            expires_at__gte=now,
        )
    }

    slots = []
    for start, end in policy.windows(slot_date):
        slot = Slot(resource_id=resource_id, slot_date=slot_date, start_time=start, end_time=end)
        slot.is_booked = any(_overlaps(start, end, b_start, b_end) for b_start, b_end in bookings)

        # A window that has already started can no longer be sold.
        window_start = timezone.make_aware(datetime.combine(slot_date, start))
        slot.is_past = window_start <= now

        lock = live_locks.get(start)
        if lock is not None:
            slot.is_locked = True
            slot.locked_by_me = viewer_id is not None and lock.locked_by_id == viewer_id
            if slot.locked_by_me:
                slot.lock_id = str(lock.id)
        slots.append(slot)
    return slots
