"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Mark confirmed bookings whose slot has ended as completed.
    Each completed booking opens a pending payout for the venue provider.

    Runs hourly.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    from apps.payments.services import record_payout

    local_now = timezone.localtime()
    completed_count = 0

    finished = Booking.objects.filter(status=Booking.Status.CONFIRMED).filter(
        Q(booking_date__lt=local_now.date())
        | Q(booking_date=local_now.date(), end_time__lte=local_now.time())
    )

    for booking in finished:
        try:
            booking.status = Booking.Status.COMPLETED
            with transaction.atomic():
                booking.save(update_fields=["status", "updated_at"])
                record_payout(booking)
            completed_count += 1
            logger.info(f"Booking {booking.booking_code} completed")
        except Exception as e:
            logger.error(f"Error completing booking {booking.id}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}


@shared_task(name="bookings.send_upcoming_booking_reminders")
def send_upcoming_booking_reminders() -> dict[str, int]:
    """
    Email customers whose confirmed booking starts within the next 24 hours.

    Each booking is reminded once. Runs every 6 hours.

    Returns:
        dict: {"sent": number of reminders queued}
    """
    now = timezone.now()
    horizon = now + timedelta(hours=24)
    today = timezone.localtime(now).date()
    sent_count = 0

    candidates = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        reminder_sent_at__isnull=True,
        booking_date__gte=today,
        booking_date__lte=today + timedelta(days=1),
    )

    for booking in candidates:
        if not now < booking.starts_at <= horizon:
            continue
        try:
            notify_booking_reminder.delay(booking.id)
            booking.reminder_sent_at = now
            booking.save(update_fields=["reminder_sent_at", "updated_at"])
            sent_count += 1
            logger.info(f"Sent reminder for booking {booking.booking_code}")
        except Exception as e:
            logger.error(f"Error sending reminder for booking {booking.id}: {e}", exc_info=True)

    if sent_count > 0:
        logger.info(f"Sent {sent_count} booking reminders")

    return {"sent": sent_count}


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

def _load(booking_id: int) -> Booking:
    return Booking.objects.select_related("customer", "venue", "venue__provider", "resource").get(id=booking_id)


@shared_task(name="bookings.notify_booking_confirmed")
def notify_booking_confirmed(booking_id: int) -> bool:
    """Confirmation email to the customer."""
    try:
        booking = _load(booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for confirmation notification")
        return False

    from apps.notifications.services import send_booking_confirmation_email

    sent = send_booking_confirmation_email(booking)
    logger.info(f"[NOTIFICATION] Booking confirmed: {booking.booking_code} to {booking.customer.email}")
    return sent


@shared_task(name="bookings.notify_provider_new_booking")
def notify_provider_new_booking(booking_id: int) -> bool:
    """Ask the venue provider to verify a manually paid booking."""
    try:
        booking = _load(booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for provider notification")
        return False

    from apps.notifications.services import send_new_booking_to_provider_email

    return send_new_booking_to_provider_email(booking)


@shared_task(name="bookings.notify_booking_reminder")
def notify_booking_reminder(booking_id: int) -> bool:
    """Reminder email ahead of the slot."""
    try:
        booking = _load(booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for reminder notification")
        return False

    from apps.notifications.services import send_booking_reminder_email

    return send_booking_reminder_email(booking)


@shared_task(name="bookings.notify_booking_cancelled")
def notify_booking_cancelled(booking_id: int) -> bool:
    """Cancellation email to the customer."""
    try:
        booking = _load(booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for cancellation notification")
        return False

    from apps.notifications.services import send_booking_cancelled_email

    sent = send_booking_cancelled_email(booking)
    logger.info(f"[NOTIFICATION] Booking cancelled: {booking.booking_code} for {booking.customer.email}")
    return sent
