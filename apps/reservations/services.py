"""Slot lock lifecycle: acquire, release, convert and sweep.

Every state change of a :class:`SlotLock` goes through this module. The
partial unique index on active locks is the final arbiter of
exclusivity; the checks performed before the insert only exist to give
callers a precise reason when they lose.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.venues.models import Resource

from .models import SlotLock

logger = logging.getLogger(__name__)


class ReservationError(Exception):
    """Base class for expected slot reservation outcomes."""

    code = "reservation_error"
    default_message = "The slot could not be reserved."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MissingSlotInfo(ReservationError):
    code = "missing_slot_info"
    default_message = "Resource, date, start time and end time are all required."


class NotAuthenticated(ReservationError):
    code = "not_authenticated"
    default_message = "Sign in to reserve a slot."


class ResourceUnavailable(ReservationError):
    code = "resource_unavailable"
    default_message = "This court is not available for booking."


class SlotLockedByAnother(ReservationError):
    code = "slot_locked_by_another"
    default_message = "This slot is being booked by another user. Please choose another slot."


class SlotAlreadyBooked(ReservationError):
    code = "slot_already_booked"
    default_message = "This slot has already been booked."


class LockNotFound(ReservationError):
    code = "lock_not_found"
    default_message = "Reservation not found."


class LockStateError(ReservationError):
    code = "lock_not_active"
    default_message = "This reservation is no longer active."


class TransientFailure(ReservationError):
    code = "transient_failure"
    default_message = "Failed to reserve the slot. Please try again."


def lock_duration() -> timedelta:
    return timedelta(minutes=settings.SLOT_LOCK_DURATION_MINUTES)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def occupying_bookings(resource_id: int, slot_date: date, start_time: time, end_time: time):
    """Bookings that still hold any part of the given window."""

    return Booking.objects.filter(
        resource_id=resource_id,
        booking_date=slot_date,
        status__in=Booking.OCCUPYING_STATUSES,
    ).filter(Q(start_time__lt=end_time) & Q(end_time__gt=start_time))


def sweep_expired_locks(now: datetime | None = None) -> int:
    """Move every active lock past its deadline to ``expired``.

    Runs as a single conditional UPDATE, so concurrent sweeps are harmless.
    """

    now = now or timezone.now()
    swept = SlotLock.objects.filter(
        status=SlotLock.Status.ACTIVE,
        expires_at__lt=now,
    ).update(status=SlotLock.Status.EXPIRED, released_at=now, updated_at=now)

    if swept:
        logger.info(f"Expired {swept} stale slot locks")
    return swept


def acquire_lock(
    resource_id: int | None,
    slot_date: date | None,
    start_time: time | None,
    end_time: time | None,
    user_id: int | None,
    *,
    now: datetime | None = None,
) -> tuple[SlotLock, bool]:
    """Grant ``user_id`` an exclusive hold on one slot.

    Returns ``(lock, created)``. Asking again for a slot the caller already
    holds returns the existing lock with ``created=False`` and does not
    extend its deadline.

    Raises a :class:`ReservationError` subclass describing why the hold was
    refused.
    """

    if not all([resource_id, slot_date, start_time, end_time]):
        raise MissingSlotInfo()
    if end_time <= start_time:
        raise MissingSlotInfo("The slot must end after it starts.")
    if not user_id:
        raise NotAuthenticated()

    now = now or timezone.now()
    try:
        sweep_expired_locks(now)
        return _acquire(resource_id, slot_date, start_time, end_time, user_id, now)
    except DatabaseError as exc:
        logger.error(
            f"Storage error while locking resource {resource_id} {slot_date} {start_time}: {exc}",
            exc_info=True,
        )
        raise TransientFailure() from exc


@transaction.atomic
def _acquire(resource_id, slot_date, start_time, end_time, user_id, now) -> tuple[SlotLock, bool]:
    # Serialises acquisitions per resource on backends with row locks.
    resource = (
        _lock_queryset_if_possible(Resource.objects.select_related("venue"))
        .filter(pk=resource_id)
        .first()
    )
    if resource is None or not resource.is_active or not resource.venue.is_bookable:
        raise ResourceUnavailable()

    existing = SlotLock.objects.filter(
        resource_id=resource_id,
        slot_date=slot_date,
        start_time=start_time,
        status=SlotLock.Status.ACTIVE,
    ).first()

    if existing is not None:
        if existing.locked_by_id != user_id:
            logger.info(
                f"User {user_id} refused lock on resource {resource_id} {slot_date} "
                f"{start_time}: held by user {existing.locked_by_id}"
            )
            raise SlotLockedByAnother()
        return existing, False

    if occupying_bookings(resource_id, slot_date, start_time, end_time).exists():
        raise SlotAlreadyBooked()

    try:
        with transaction.atomic():
            lock = SlotLock.objects.create(
                resource_id=resource_id,
                slot_date=slot_date,
                start_time=start_time,
                end_time=end_time,
                locked_by_id=user_id,
                locked_at=now,
                expires_at=now + lock_duration(),
            )
    except IntegrityError:
        # Lost the race to a concurrent insert for the same slot.
        logger.info(
            f"User {user_id} lost lock race on resource {resource_id} {slot_date} {start_time}"
        )
        raise SlotLockedByAnother()

    logger.info(
        f"Lock {lock.id} granted to user {user_id} on resource {resource_id} "
        f"{slot_date} {lock.label} until {lock.expires_at.isoformat()}"
    )
    return lock, True


def get_lock(lock_id, user_id: int | None = None) -> SlotLock:
    """Fetch a lock, hiding locks that belong to somebody else."""

    try:
        lock = SlotLock.objects.select_related("resource__venue").get(pk=lock_id)
    except (SlotLock.DoesNotExist, ValidationError):
        raise LockNotFound()
    if user_id is not None and lock.locked_by_id != user_id:
        raise LockNotFound()
    return lock


@transaction.atomic
def release_lock(lock_id, user_id: int | None = None, *, now: datetime | None = None) -> SlotLock:
    """Give a hold back before its deadline.

    Releasing a lock that is already released, expired or converted is a
    no-op; a converted lock keeps its status.
    """

    lock = get_lock(lock_id, user_id)
    lock = SlotLock.objects.select_for_update().get(pk=lock.pk)
    if lock.status != SlotLock.Status.ACTIVE:
        return lock

    lock.status = SlotLock.Status.RELEASED
    lock.released_at = now or timezone.now()
    lock.save(update_fields=["status", "released_at", "updated_at"])
    logger.info(f"Lock {lock.id} released by user {lock.locked_by_id}")
    return lock


def convert_lock(lock: SlotLock) -> None:
    """Mark an active lock as consumed by a booking.

    Must run inside the transaction that creates the booking.
    """

    updated = SlotLock.objects.filter(pk=lock.pk, status=SlotLock.Status.ACTIVE).update(
        status=SlotLock.Status.CONVERTED,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise LockStateError()
    lock.status = SlotLock.Status.CONVERTED
