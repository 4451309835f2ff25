"""Domain services for booking workflows.

A booking is only ever created from a live slot lock held by the caller.
Finalisation re-checks occupancy under row locks, writes the booking and
converts the lock in one transaction, so a failure leaves the lock active
for a retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.payments.models import Payment
from apps.reservations.models import SlotLock
from apps.reservations.services import convert_lock, occupying_bookings
from apps.venues.models import Resource

from .models import Booking

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class BookingError(Exception):
    """Base class for booking workflow failures."""

    code = "booking_error"
    default_message = "The booking could not be completed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class LockNotUsable(BookingError):
    code = "lock_not_usable"
    default_message = "Reservation not found."


class LockExpired(LockNotUsable):
    code = "lock_expired"
    default_message = "Your reservation timed out. Please select the slot again."


class SlotNoLongerAvailable(BookingError):
    code = "slot_no_longer_available"
    default_message = "This slot is no longer available."


class BookingStateError(BookingError):
    code = "invalid_booking_state"
    default_message = "This booking cannot be changed in its current state."


class BookingPermissionError(BookingError):
    code = "permission_denied"
    default_message = "You cannot manage this booking."


@dataclass
class BookingDetails:
    """Caller-supplied fields attached to a booking on finalisation.

    ``payment_verified`` is set only after a gateway signature check.
    A ``payment_intent_id`` without verification is a manual payment
    reference that the venue still has to check.
    """

    notes: str = ""
    payment_intent_id: str = ""
    payment_verified: bool = False
    convenience_fee: Decimal = Decimal("0.00")


# ----------------------------------------------------------------------------
# Pricing
# ----------------------------------------------------------------------------


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def slot_price(resource: Resource, start_time: time, end_time: time) -> Decimal:
    """Hourly rate of ``resource`` prorated over the window."""

    anchor = date(2000, 1, 1)
    minutes = (datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)).total_seconds() / 60
    return _money(resource.hourly_rate * Decimal(int(minutes)) / Decimal(60))


def convenience_fee_for(amount: Decimal) -> Decimal:
    """Customer-facing fee, rounded to whole currency units."""

    percent = Decimal(str(settings.CONVENIENCE_FEE_PERCENT))
    return (amount * percent / Decimal(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def split_commission(amount: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(percentage, platform_commission, provider_payout)``."""

    percent = Decimal(str(settings.PLATFORM_COMMISSION_PERCENT))
    commission = _money(amount * percent / Decimal(100))
    return percent, commission, amount - commission


# ----------------------------------------------------------------------------
# Finalisation
# ----------------------------------------------------------------------------


def _initial_statuses(details: BookingDetails) -> tuple[str, str]:
    if details.payment_verified:
        return Booking.Status.CONFIRMED, Booking.PaymentStatus.COMPLETED
    if details.payment_intent_id:
        return Booking.Status.PENDING_CONFIRMATION, Booking.PaymentStatus.PENDING
    return Booking.Status.PENDING, Booking.PaymentStatus.PENDING


def finalize_booking(
    lock_id,
    user_id: int,
    details: BookingDetails | None = None,
    *,
    now: datetime | None = None,
) -> Booking:
    """Turn the caller's live lock into a booking.

    Raises :class:`LockNotUsable` when the lock is missing, foreign,
    already converted or past its deadline, and
    :class:`SlotNoLongerAvailable` when another claim on the slot is
    found. In both cases nothing is written.
    """

    details = details or BookingDetails()
    now = now or timezone.now()

    with transaction.atomic():
        try:
            lock = SlotLock.objects.select_for_update().get(pk=lock_id)
        except (SlotLock.DoesNotExist, ValidationError):
            raise LockNotUsable()

        if lock.locked_by_id != user_id:
            raise LockNotUsable()
        if lock.status == SlotLock.Status.CONVERTED:
            raise LockNotUsable("This reservation has already been booked.")
        if lock.status == SlotLock.Status.RELEASED:
            raise LockNotUsable("This reservation was released.")
        if not lock.is_live(now):
            raise LockExpired()

        resource = Resource.objects.select_related("venue").get(pk=lock.resource_id)

        rival_lock = (
            SlotLock.objects.filter(
                resource_id=lock.resource_id,
                slot_date=lock.slot_date,
                start_time=lock.start_time,
                status=SlotLock.Status.ACTIVE,
            )
            .exclude(pk=lock.pk)
            .exists()
        )
        if rival_lock or occupying_bookings(
            lock.resource_id, lock.slot_date, lock.start_time, lock.end_time
        ).exists():
            logger.warning(f"Lock {lock.id} lost its slot before finalisation")
            raise SlotNoLongerAvailable()

        amount = slot_price(resource, lock.start_time, lock.end_time)
        percent, commission, payout = split_commission(amount)
        status, payment_status = _initial_statuses(details)

        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    customer_id=user_id,
                    venue=resource.venue,
                    resource=resource,
                    slot_lock=lock,
                    booking_date=lock.slot_date,
                    start_time=lock.start_time,
                    end_time=lock.end_time,
                    status=status,
                    payment_status=payment_status,
                    payment_intent_id=details.payment_intent_id,
                    total_amount=amount,
                    convenience_fee=details.convenience_fee,
                    commission_percentage=percent,
                    platform_commission=commission,
                    provider_payout=payout,
                    notes=details.notes,
                )
        except IntegrityError as exc:
            raise SlotNoLongerAvailable() from exc

        convert_lock(lock)

        from .tasks import notify_booking_confirmed, notify_provider_new_booking

        if booking.status == Booking.Status.CONFIRMED:
            transaction.on_commit(lambda: notify_booking_confirmed.delay(booking.id))
        elif booking.status == Booking.Status.PENDING_CONFIRMATION:
            transaction.on_commit(lambda: notify_provider_new_booking.delay(booking.id))

    logger.info(
        f"Booking {booking.booking_code} created from lock {lock.id} "
        f"by user {user_id} ({booking.status}, {booking.total_amount})"
    )
    return booking


# ----------------------------------------------------------------------------
# Post-booking transitions
# ----------------------------------------------------------------------------


def _is_admin(user) -> bool:
    return bool(
        getattr(user, "is_staff", False)
        or (hasattr(user, "is_platform_admin") and user.is_platform_admin())
    )


def _cancelled_by(booking: Booking, user) -> str:
    if _is_admin(user):
        return Booking.CancelledBy.ADMIN
    if booking.venue.provider_id == user.id:
        return Booking.CancelledBy.PROVIDER
    if booking.customer_id == user.id:
        return Booking.CancelledBy.CUSTOMER
    raise BookingPermissionError()


@transaction.atomic
def cancel_booking(booking: Booking, user, reason: str = "") -> Booking:
    """Cancel a booking and free its slot."""

    booking = Booking.objects.select_for_update().select_related("venue").get(pk=booking.pk)
    cancelled_by = _cancelled_by(booking, user)
    if not booking.occupies_slot:
        raise BookingStateError("Completed or cancelled bookings cannot be cancelled.")

    booking.mark_cancelled(cancelled_by, reason)
    logger.info(f"Booking {booking.booking_code} cancelled by {cancelled_by} {user.id}")

    from .tasks import notify_booking_cancelled

    transaction.on_commit(lambda: notify_booking_cancelled.delay(booking.id))
    return booking


@transaction.atomic
def confirm_booking(booking: Booking, user) -> Booking:
    """Confirm a booking after the venue or an admin has checked the payment."""

    booking = Booking.objects.select_for_update().select_related("venue").get(pk=booking.pk)
    if not (_is_admin(user) or booking.venue.provider_id == user.id):
        raise BookingPermissionError()
    if booking.status not in (Booking.Status.PENDING, Booking.Status.PENDING_CONFIRMATION):
        raise BookingStateError("Only pending bookings can be confirmed.")

    booking.mark_paid()
    Payment.objects.filter(booking=booking, status=Payment.Status.PENDING).update(
        status=Payment.Status.COMPLETED,
        paid_at=timezone.now(),
    )
    logger.info(f"Booking {booking.booking_code} confirmed by user {user.id}")

    from .tasks import notify_booking_confirmed

    transaction.on_commit(lambda: notify_booking_confirmed.delay(booking.id))
    return booking
