"""Booking domain models for CourtBook."""

from __future__ import annotations

import secrets
from datetime import datetime
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """A confirmed (or awaiting confirmation) claim on one slot of a resource."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PENDING_CONFIRMATION = "pending_confirmation", _("Awaiting payment verification")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    # Statuses under which a booking keeps its slot unavailable to others.
    OCCUPYING_STATUSES = (
        Status.PENDING,
        Status.PENDING_CONFIRMATION,
        Status.CONFIRMED,
    )

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    class CancelledBy(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        PROVIDER = "provider", _("Provider")
        ADMIN = "admin", _("Admin")
        SYSTEM = "system", _("System")

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    resource = models.ForeignKey(
        "venues.Resource",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    slot_lock = models.OneToOneField(
        "reservations.SlotLock",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking",
        help_text=_("The hold this booking was finalised from."),
    )
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    booking_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_intent_id = models.CharField(max_length=255, blank=True)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    convenience_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    commission_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Platform commission rate captured at booking time."),
    )
    platform_commission = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    provider_payout = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    notes = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=20, choices=CancelledBy.choices, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-booking_date", "-start_time"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="booking_valid_window",
            ),
            models.UniqueConstraint(
                fields=["resource", "booking_date", "start_time"],
                condition=Q(status__in=["pending", "pending_confirmation", "confirmed"]),
                name="booking_one_occupying_per_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["resource", "booking_date", "status"], name="booking_slot_idx"),
            models.Index(fields=["status", "booking_date"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} on {self.resource_id}"

    def clean(self) -> None:
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("The booking must end after it starts."))

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_code() -> str:
        return secrets.token_hex(4).upper()

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    @property
    def starts_at(self) -> datetime:
        return timezone.make_aware(datetime.combine(self.booking_date, self.start_time))

    @property
    def ends_at(self) -> datetime:
        return timezone.make_aware(datetime.combine(self.booking_date, self.end_time))

    @property
    def occupies_slot(self) -> bool:
        return self.status in self.OCCUPYING_STATUSES

    def mark_cancelled(self, cancelled_by: str, reason: str = "") -> None:
        self.status = self.Status.CANCELLED
        self.cancelled_by = cancelled_by
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancelled_by", "cancellation_reason", "cancelled_at", "updated_at"])

    def mark_paid(self) -> None:
        self.payment_status = self.PaymentStatus.COMPLETED
        self.status = self.Status.CONFIRMED
        self.save(update_fields=["payment_status", "status", "updated_at"])
