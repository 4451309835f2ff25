"""Transactional booking emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send a single email, rendering ``template_name`` when no HTML is given.

    Delivery failures are logged and reported through the return value so
    that a broken mail server never rolls back the booking that triggered
    the message.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _booking_context(booking: "Booking") -> dict:
    return {
        "customer_name": booking.customer.display_name,
        "venue_name": booking.venue.name,
        "venue_location": booking.venue.location,
        "resource_name": booking.resource.name,
        "booking_date": booking.booking_date.strftime("%d %b %Y"),
        "time_slot": booking.label,
        "total_amount": booking.total_amount + booking.convenience_fee,
        "currency": settings.BOOKING_CURRENCY,
        "booking_code": booking.booking_code,
    }


def send_booking_confirmation_email(booking: "Booking") -> bool:
    """Tell the customer their slot is confirmed."""
    context = _booking_context(booking)
    subject = f"Booking #{booking.booking_code} confirmed at {context['venue_name']}"

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['customer_name']},</h2>
        <p>Your booking is confirmed.</p>

        <ul>
            <li><strong>Booking code:</strong> {context['booking_code']}</li>
            <li><strong>Venue:</strong> {context['venue_name']}, {context['venue_location']}</li>
            <li><strong>Court:</strong> {context['resource_name']}</li>
            <li><strong>Date:</strong> {context['booking_date']}</li>
            <li><strong>Time:</strong> {context['time_slot']}</li>
            <li><strong>Paid:</strong> {context['total_amount']} {context['currency']}</li>
        </ul>

        <p>Please arrive 10 minutes early.</p>

        <p>See you on court,<br>The CourtBook team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.customer.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )


def send_booking_reminder_email(booking: "Booking") -> bool:
    """Remind the customer about a booking starting within a day."""
    context = _booking_context(booking)
    subject = f"Reminder: {context['time_slot']} at {context['venue_name']}"

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['customer_name']},</h2>
        <p>This is a reminder of your upcoming booking.</p>

        <ul>
            <li><strong>Venue:</strong> {context['venue_name']}, {context['venue_location']}</li>
            <li><strong>Court:</strong> {context['resource_name']}</li>
            <li><strong>Date:</strong> {context['booking_date']}</li>
            <li><strong>Time:</strong> {context['time_slot']}</li>
            <li><strong>Booking code:</strong> {context['booking_code']}</li>
        </ul>

        <p>The CourtBook team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.customer.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )


def send_booking_cancelled_email(booking: "Booking") -> bool:
    """Let the customer know their booking was cancelled."""
    context = _booking_context(booking)
    context["reason"] = booking.cancellation_reason or "No reason given"
    subject = f"Booking #{booking.booking_code} cancelled"

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['customer_name']},</h2>
        <p>Your booking <strong>#{context['booking_code']}</strong> at
        <strong>{context['venue_name']}</strong> on {context['booking_date']}
        ({context['time_slot']}) has been cancelled.</p>

        <p><strong>Reason:</strong> {context['reason']}</p>

        <p>The slot is open again and you can book another time at any point.</p>

        <p>The CourtBook team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.customer.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )


def send_new_booking_to_provider_email(booking: "Booking") -> bool:
    """Alert the venue provider about a booking that needs payment verification."""
    context = _booking_context(booking)
    context["payment_reference"] = booking.payment_intent_id or "-"
    subject = f"New booking #{booking.booking_code} awaiting verification"

    html_message = f"""
    <html>
    <body>
        <h2>New booking at {context['venue_name']}</h2>

        <ul>
            <li><strong>Customer:</strong> {context['customer_name']}</li>
            <li><strong>Court:</strong> {context['resource_name']}</li>
            <li><strong>Date:</strong> {context['booking_date']}</li>
            <li><strong>Time:</strong> {context['time_slot']}</li>
            <li><strong>Payment reference:</strong> {context['payment_reference']}</li>
        </ul>

        <p>Verify the payment and confirm the booking from your dashboard.</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.venue.provider.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )
