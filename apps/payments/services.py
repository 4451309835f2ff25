"""Payment workflows tying gateway orders to slot locks and bookings."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.services import (
    BookingDetails,
    BookingError,
    LockExpired,
    convenience_fee_for,
    finalize_booking,
    slot_price,
)
from apps.reservations.services import get_lock

from .gateway import PaymentVerificationError, RazorpayGateway
from .models import Payment, Payout

logger = logging.getLogger(__name__)


def create_order_for_lock(lock_id, user) -> tuple[Payment, RazorpayGateway]:
    """Open a gateway order for the slot held by ``lock_id``.

    The amount charged is the slot price plus the convenience fee.
    """

    lock = get_lock(lock_id, user.id)
    if not lock.is_live():
        raise LockExpired()

    amount = slot_price(lock.resource, lock.start_time, lock.end_time)
    fee = convenience_fee_for(amount)
    total = amount + fee

    gateway = RazorpayGateway.from_settings()
    order = gateway.create_order(
        total,
        receipt=f"lock_{lock.id.hex}",
        notes={
            "lock_id": str(lock.id),
            "resource_id": str(lock.resource_id),
            "customer_id": str(user.id),
            "slot": f"{lock.slot_date} {lock.label}",
        },
    )

    payment = Payment.objects.create(
        customer=user,
        slot_lock=lock,
        method=Payment.Method.DEMO if order.test_mode else Payment.Method.RAZORPAY,
        amount=amount,
        convenience_fee=fee,
        total_amount=total,
        currency=order.currency,
        gateway_order_id=order.order_id,
        metadata={"receipt": order.receipt},
    )
    logger.info(f"Payment {payment.pk} opened with order {order.order_id} for lock {lock.id}")
    return payment, gateway


def _flag_unless_completed(payment: Payment, new_status: str, payment_id: str) -> bool:
    """Move ``payment`` to ``new_status`` unless it has already completed."""

    updated = (
        Payment.objects.filter(pk=payment.pk)
        .exclude(status=Payment.Status.COMPLETED)
        .update(status=new_status, gateway_payment_id=payment_id or "", updated_at=timezone.now())
    )
    return bool(updated)


def verify_and_finalize(
    order_id: str,
    payment_id: str,
    signature: str,
    user,
    *,
    notes: str = "",
) -> Booking:
    """Check the gateway signature and turn the paid lock into a booking.

    The payment row stays locked for the whole check, so a retried or
    double-submitted verification waits for the first one and then gets
    its booking back. A verified payment whose lock can no longer be
    finalised is flagged ``refund_due`` and the booking error is re-raised.
    """

    gateway = RazorpayGateway.from_settings()
    failure: Exception | None = None

    with transaction.atomic():
        try:
            payment = Payment.objects.select_for_update().get(gateway_order_id=order_id, customer=user)
        except Payment.DoesNotExist:
            raise PaymentVerificationError("Unknown payment order.")

        if payment.status == Payment.Status.COMPLETED and payment.booking_id:
            return payment.booking

        if not gateway.verify_signature(order_id, payment_id, signature):
            _flag_unless_completed(payment, Payment.Status.FAILED, payment_id)
            logger.warning(f"Signature mismatch for order {order_id} by user {user.id}")
            failure = PaymentVerificationError("Payment verification failed.")
        else:
            details = BookingDetails(
                notes=notes,
                payment_intent_id=payment_id,
                payment_verified=True,
                convenience_fee=payment.convenience_fee,
            )
            try:
                booking = finalize_booking(payment.slot_lock_id, user.id, details)
            except BookingError as exc:
                if not _flag_unless_completed(payment, Payment.Status.REFUND_DUE, payment_id):
                    payment.refresh_from_db()
                    return payment.booking
                logger.error(f"Order {order_id} was paid but could not be booked: {exc}")
                failure = exc
            else:
                payment.booking = booking
                payment.status = Payment.Status.COMPLETED
                payment.gateway_payment_id = payment_id
                payment.paid_at = timezone.now()
                payment.save(update_fields=["booking", "status", "gateway_payment_id", "paid_at", "updated_at"])
                logger.info(f"Order {order_id} verified, booking {booking.booking_code} confirmed")

    if failure is not None:
        raise failure
    return booking


@transaction.atomic
def record_manual_payment(booking: Booking) -> Payment:
    """Record a UPI reference the customer submitted for venue verification."""

    return Payment.objects.create(
        customer=booking.customer,
        slot_lock=booking.slot_lock,
        booking=booking,
        method=Payment.Method.UPI_MANUAL,
        amount=booking.total_amount,
        convenience_fee=booking.convenience_fee,
        total_amount=booking.total_amount + booking.convenience_fee,
        currency=settings.BOOKING_CURRENCY,
        gateway_payment_id=booking.payment_intent_id,
    )


# ----------------------------------------------------------------------------
# Provider payouts
# ----------------------------------------------------------------------------


class PayoutAlreadySettled(Exception):
    code = "payout_already_settled"

    def __init__(self, message: str = "This payout has already been settled.") -> None:
        super().__init__(message)


def record_payout(booking: Booking) -> Payout:
    """Open the provider payout for a completed booking; repeat calls return it."""

    payout, created = Payout.objects.get_or_create(
        booking=booking,
        defaults={
            "provider_id": booking.venue.provider_id,
            "gross_amount": booking.total_amount,
            "commission_percentage": booking.commission_percentage,
            "commission_amount": booking.platform_commission,
            "net_amount": booking.provider_payout,
        },
    )
    if created:
        logger.info(f"Payout {payout.pk} of {payout.net_amount} opened for booking {booking.booking_code}")
    return payout


@transaction.atomic
def settle_payout(payout: Payout, reference: str, *, on_date: date | None = None) -> Payout:
    """Record the bank transfer that paid ``payout`` out to the provider."""

    payout = Payout.objects.select_for_update().get(pk=payout.pk)
    if payout.status == Payout.Status.COMPLETED:
        raise PayoutAlreadySettled()

    payout.status = Payout.Status.COMPLETED
    payout.transaction_reference = reference
    payout.payout_date = on_date or timezone.localdate()
    payout.save(update_fields=["status", "transaction_reference", "payout_date", "updated_at"])
    logger.info(f"Payout {payout.pk} settled with reference {reference}")
    return payout


def payout_summary(queryset) -> dict[str, object]:
    """Totals shown on the provider earnings dashboard."""

    zero = Decimal("0.00")
    totals = queryset.aggregate(
        total_gross=Sum("gross_amount"),
        total_commission=Sum("commission_amount"),
        total_net=Sum("net_amount"),
        pending_payouts=Count("id", filter=Q(status=Payout.Status.PENDING)),
        completed_payouts=Count("id", filter=Q(status=Payout.Status.COMPLETED)),
    )
    for key in ("total_gross", "total_commission", "total_net"):
        totals[key] = totals[key] or zero
    return totals
